import os

from dotenv import load_dotenv

load_dotenv()

from filmmania import create_app  # noqa: E402

app = create_app(os.getenv("APP_ENV", "production"))
