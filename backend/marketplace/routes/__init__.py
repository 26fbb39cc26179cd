# Routes package init
"""
GoEveryWork Marketplace — API Routes Package
==============================================

Route Inventory:
    - listings.py:   /api/services ...           (browse, search, map, slug, CRUD)
    - reviews.py:    /api/services/{id}/reviews  (list, stats, submit)
    - categories.py: GET /api/categories
    - sitemap.py:    GET /api/sitemap
    - health.py:     GET /health

Routes stay thin: extract parameters, call a service, set headers.
"""
