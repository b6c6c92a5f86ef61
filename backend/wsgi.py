# backend/wsgi.py
from bullion import create_app

app = create_app()
