"""
Services Module

Query/response composition and mutation patterns used by the routers:
- query / projections / views: paginated, denormalized read views
- toggles: like and subscription toggles with counter maintenance
- ownership: ownership-gated update/delete
- stats: channel dashboard aggregates
- asset_store: external binary asset store (Cloudinary)
"""
