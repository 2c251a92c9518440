from typing import List, Optional, Set

import firebase_admin
from firebase_admin import firestore as fs
from google.cloud import firestore

POSTS_COLLECTION = "blog_posts"
LIKES_SUBCOLLECTION = "likes"

# batch size for liked-post lookups
LIKE_LOOKUP_CHUNK = 10


class FirestoreDB:
    def __init__(self, app: firebase_admin.App):
        self.db = fs.client(app)

    def collection(self, name: str):
        return self.db.collection(name)

    def post_ref(self, post_id: str):
        return self.collection(POSTS_COLLECTION).document(post_id)

    def like_ref(self, post_id: str, user_id: str):
        """A user's like record; one document per user under the post"""
        return self.post_ref(post_id).collection(LIKES_SUBCOLLECTION).document(user_id)

    def update_post_likes(self, post_id: str, increment: int = 1) -> Optional[int]:
        """Move the like counter of a post, never below zero"""
        post_ref = self.post_ref(post_id)
        transaction = self.db.transaction()

        @firestore.transactional
        def update_in_transaction(transaction, post_ref):
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                return None

            post_data = snapshot.to_dict()
            current_likes = post_data.get("likes", 0) or 0
            new_likes = max(current_likes + increment, 0)

            transaction.update(post_ref, {"likes": new_likes})
            return new_likes

        return update_in_transaction(transaction, post_ref)

    def add_like(self, post_id: str, user_id: str) -> Optional[int]:
        """Record a like from a user and bump the post's counter"""
        like_ref = self.like_ref(post_id, user_id)

        if like_ref.get().exists:
            # Like already exists, don't increment counter again
            return None

        like_ref.set({
            "userId": user_id,
            "createdAt": firestore.SERVER_TIMESTAMP,
        })
        return self.update_post_likes(post_id, 1)

    def remove_like(self, post_id: str, user_id: str) -> Optional[int]:
        """Delete a user's like record and drop the post's counter"""
        like_ref = self.like_ref(post_id, user_id)

        if not like_ref.get().exists:
            return None

        like_ref.delete()
        return self.update_post_likes(post_id, -1)

    def liked_post_ids(self, post_ids: List[str], user_id: str) -> Set[str]:
        """
        Batch fetch which of the given posts a user has liked
        Returns a set of post IDs that the user has liked
        """
        if not post_ids or not user_id:
            return set()

        liked_posts = set()

        for i in range(0, len(post_ids), LIKE_LOOKUP_CHUNK):
            chunk = post_ids[i:i + LIKE_LOOKUP_CHUNK]
            refs = [self.like_ref(post_id, user_id) for post_id in chunk]

            for snapshot in self.db.get_all(refs):
                if snapshot.exists:
                    # likes/{user_id} -> blog_posts/{post_id}
                    liked_posts.add(snapshot.reference.parent.parent.id)

        return liked_posts
