"""
FastAPI routers grouped by domain (auth/session, records, settings, backup, etc.).

Each module exposes an APIRouter included by app.create_app. Routers
translate HTTP to service calls and service errors to HTTPException; they
never touch the stores directly.
"""
