"""
FastAPI routers grouped by domain (auth, payments, hooks, content, uploads).

Each module exposes an APIRouter included by the app factory. Endpoints only
translate HTTP bodies into service calls; services come from app.state via the
helpers in deps.py.
"""
