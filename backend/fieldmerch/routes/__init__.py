# Routes package init
"""
FieldMerch Backend: API Routes Package
========================================

Route Inventory:
    - facings.py: /podravka-facing (list, user batches)
                  /podravka-facing/batch (create, update, delete, detail)
    - competitor_facings.py: POST /competitor-facing/batch, GET /with-competitors
    - health.py:  GET /health

Routes stay thin: resolve the caller, pass the body to a service, return
its response model. Business rules live in services.
"""
