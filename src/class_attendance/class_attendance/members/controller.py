from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..common.web import json_endpoint, login_required, ok, payload, scoped_class

_FIELDS = ("member_number", "phone", "address", "city", "province", "date_of_birth")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/members", methods=["GET"], endpoint="list_members")
    @login_required
    @json_endpoint
    def list_members():
        class_number = scoped_class(request.args.get("class_number"))
        members = container.member_service.list_for_class(class_number)
        members = container.member_service.search(members, request.args.get("q", ""))
        return ok(class_number=class_number, members=[m.to_dict() for m in members])

    @app.route("/api/members", methods=["POST"], endpoint="create_member")
    @login_required
    @json_endpoint
    def create_member():
        data = payload()
        class_number = scoped_class(data.get("class_number"))
        member_id = container.member_service.save(
            class_number=class_number,
            name=data.get("name", ""),
            **{f: data.get(f) for f in _FIELDS},
        )
        return ok("Member added", code=201, id=member_id)

    @app.route("/api/members/<int:member_id>", methods=["PUT"], endpoint="update_member")
    @login_required
    @json_endpoint
    def update_member(member_id: int):
        data = payload()
        existing = container.member_service.get(member_id)
        class_number = scoped_class(existing.class_number)
        container.member_service.save(
            member_id=member_id,
            class_number=class_number,
            name=data.get("name", ""),
            **{f: data.get(f) for f in _FIELDS},
        )
        return ok("Member updated", member=container.member_service.get(member_id).to_dict())

    @app.route("/api/members/<int:member_id>", methods=["DELETE"], endpoint="delete_member")
    @login_required
    @json_endpoint
    def delete_member(member_id: int):
        existing = container.member_service.get(member_id)
        scoped_class(existing.class_number)
        container.member_service.delete(member_id)
        return ok("Member deleted")
