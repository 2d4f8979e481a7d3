import os
from dotenv import load_dotenv

load_dotenv()

from hidden_archives import create_app  # noqa: E402

config = os.getenv("APP_ENV", "production")

app = create_app(config)

print(f"[BOOT] Running in {config} mode")
