"""
Blog Backend - Services Layer
==============================

What:  Business logic between routes (HTTP) and stores (SQL).
How:   Services receive the request's AsyncSession on every call, delegate
       persistence to the stores and translate missing rows and database
       failures into application exceptions.

Service Inventory:
    - PostService:    post CRUD, search pages, likes, post images
    - CommentService: comment CRUD with the update existence check
    - FileService:    post image validation, storage and cleanup
"""
