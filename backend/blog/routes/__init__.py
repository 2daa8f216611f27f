"""
Blog Backend - API Routes Package
==================================

Route Inventory:
    - posts.py:     GET/POST /api/posts, GET/PUT/DELETE /api/posts/{id},
                    POST /api/posts/{id}/likes, GET/PUT /api/posts/{id}/image
    - comments.py:  GET/POST /api/posts/{id}/comments,
                    GET/PUT/DELETE /api/posts/{id}/comments/{commentId}
    - health.py:    GET /health

Routes stay thin: extract parameters, call a service, pick the status code.
"""
