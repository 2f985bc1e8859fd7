"""Development entry point: ``python app.py`` (APP_ENV picks the settings)."""

from src.geo_attendance.geo_attendance.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=bool(app.config.get("DEBUG")))
