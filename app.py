import os

from src.badge_checkin.badge_checkin.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host=os.getenv("KIOSK_HOST", "127.0.0.1"), port=int(os.getenv("KIOSK_PORT", "5000")))
