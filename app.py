"""Development entry point: ``python app.py`` (settings picked by APP_ENV)."""

from src.class_attendance.class_attendance.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=bool(app.config.get("DEBUG", False)))
