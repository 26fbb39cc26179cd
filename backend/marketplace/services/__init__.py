# Services package init
"""
GoEveryWork Marketplace — Services Layer
==========================================

Business logic between the routes (HTTP) and the database (persistence).

Service Inventory:
    - slug_service: listing slug codec (pure functions)
    - listing_presenter: ORM row → response models (slug, labels, SEO)
    - ListingService: browse, search, map, slug resolution, provider writes
    - ReviewService: paginated reviews, rating stats, review submission
    - CategoryService: category list
    - SitemapService: public sitemap entries
"""
