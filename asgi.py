"""
asgi.py -- ASGI entry point.

The application is assembled by api.main.create_app(); this module only
instantiates it with settings from the environment so an ASGI server has a
module-level attribute to import.

Run with:  uvicorn asgi:app --reload
"""

from api.main import create_app

app = create_app()
