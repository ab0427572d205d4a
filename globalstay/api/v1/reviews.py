"""Review API routes."""

import uuid

from fastapi import APIRouter, Depends, status

from globalstay.api.deps import get_current_active_user, get_repositories
from globalstay.models.user import User
from globalstay.repositories import Repositories
from globalstay.schemas.listing import ListingResponse
from globalstay.schemas.review import ReviewCreate, ReviewResponse
from globalstay.services import review_service

router = APIRouter(prefix="/api/v1/listings/{listing_id}/reviews", tags=["reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED, summary="Review a listing")
async def create_review(
    listing_id: uuid.UUID,
    body: ReviewCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> ReviewResponse:
    review = await review_service.add_review(repos, listing_id, current_user, body.rating, body.comment)
    return ReviewResponse.model_validate(review)


@router.delete("/{review_id}", response_model=ListingResponse, summary="Delete your review")
async def delete_review(
    listing_id: uuid.UUID,
    review_id: uuid.UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> ListingResponse:
    """Remove the review and return the listing with refreshed rating aggregates."""
    listing = await review_service.delete_review(repos, listing_id, review_id, current_user)
    return ListingResponse.from_model(listing)
