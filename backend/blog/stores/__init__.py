"""
Blog Backend - Data Access Layer
=================================

Store Inventory:
    - TagStore / SqlTagStore:         tag name → id, get-or-create
    - PostStore / SqlPostStore:       posts, tag links, search, likes
    - CommentStore / SqlCommentStore: comments keyed by post

Module-level singletons (tag_store, post_store, comment_store) are stateless;
the AsyncSession is passed into every call.
"""
