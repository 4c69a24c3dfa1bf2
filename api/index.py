# api/index.py
# Vercel entry point: serves the module-level `app`, vercel.json rewrites /api/* here
from backend.app import create_app
from backend.config import get_settings
from backend.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL, json_logs=True)

app = create_app(settings)

# Vercel ignores this block, but it's useful for local testing
if __name__ == '__main__':
    app.run(debug=settings.DEBUG, port=settings.PORT)
