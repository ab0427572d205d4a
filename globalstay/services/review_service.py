"""Reviews and the listing rating aggregates derived from them.

``Listing.avg_rating`` and ``Listing.review_count`` are always recomputed
from scratch by re-reading every review in the listing's current set; there
is no running total to drift out of sync.
"""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal

from globalstay.exceptions import NotFoundError, OwnershipError, RequestValidationFailed
from globalstay.models.listing import Listing
from globalstay.models.review import Review
from globalstay.models.user import User
from globalstay.repositories import Repositories, Repository

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def average_rating(ratings: list[int]) -> Decimal:
    """Mean rating rounded half-up to one decimal, or 0 with no ratings."""
    if not ratings:
        return Decimal("0")
    return (Decimal(sum(ratings)) / len(ratings)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


async def recompute_listing_rating(reviews: Repository[Review], listing: Listing) -> Listing:
    """Refresh ``listing``'s rating caches from its review set (not saved).

    References to reviews that no longer exist are dropped from the list.
    """
    present: list[str] = []
    ratings: list[int] = []
    for review_id in listing.review_ids:
        review = await reviews.find_by_id(uuid.UUID(review_id))
        if review is None:
            continue
        present.append(review_id)
        ratings.append(review.rating)

    listing.review_ids = present
    listing.review_count = len(ratings)
    listing.avg_rating = average_rating(ratings)
    logger.debug("Listing %s rating recomputed: %s over %d reviews", listing.id, listing.avg_rating, listing.review_count)
    return listing


async def refresh_listing_rating(repos: Repositories, listing_id: uuid.UUID) -> Listing:
    listing = await repos.listings.find_by_id(listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")
    await recompute_listing_rating(repos.reviews, listing)
    return await repos.listings.save(listing)


async def add_review(
    repos: Repositories,
    listing_id: uuid.UUID,
    author: User,
    rating: int,
    comment: str,
) -> Review:
    """Store a review and recompute the listing's aggregates.

    A failure while saving the listing propagates so the enclosing unit of
    work rolls back the review as well.
    """
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise RequestValidationFailed("Rating must be an integer between 1 and 5.")

    listing = await repos.listings.find_by_id(listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")

    review = await repos.reviews.save(
        Review(listing_id=listing.id, author_id=author.id, rating=rating, comment=comment)
    )
    listing.review_ids = [*listing.review_ids, str(review.id)]
    await recompute_listing_rating(repos.reviews, listing)
    await repos.listings.save(listing)

    logger.info("Review %s added to listing %s (rating=%d)", review.id, listing.id, rating)
    return review


async def delete_review(
    repos: Repositories,
    listing_id: uuid.UUID,
    review_id: uuid.UUID,
    user: User,
) -> Listing:
    """Delete the author's review and recompute the listing's aggregates."""
    listing = await repos.listings.find_by_id(listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")
    review = await repos.reviews.find_by_id(review_id)
    if review is None or review.listing_id != listing.id:
        raise NotFoundError("Review not found")
    if review.author_id != user.id:
        raise OwnershipError("You did not create this review.")

    listing.review_ids = [rid for rid in listing.review_ids if rid != str(review.id)]
    await repos.reviews.delete_by_id(review.id)
    await recompute_listing_rating(repos.reviews, listing)
    listing = await repos.listings.save(listing)

    logger.info("Review %s deleted from listing %s", review_id, listing.id)
    return listing
