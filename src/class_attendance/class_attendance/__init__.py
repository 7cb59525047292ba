"""Church class attendance service.

This package is organized by feature modules (members, attendance, reports, ...)
with a thin Flask controller layer over service/repository layers.
"""
