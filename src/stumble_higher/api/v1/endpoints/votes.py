"""Vote-related endpoints for the Stumble Higher API."""

from fastapi import APIRouter, HTTPException, status

from stumble_higher.schemas.vote import MyVoteResponse, VoteCreate, VoteResponse, VoteSummary
from stumble_higher.services import voting
from stumble_higher.services.errors import (
    ConfigurationError,
    ResourceNotFoundError,
    VoteValidationError,
)
from stumble_higher.services.resources import get_resource
from stumble_higher.services.scoring import calculate_quality_score

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/votes", tags=["votes"])


def _as_response(result: voting.VoteResult) -> VoteResponse:
    return VoteResponse(
        resource_id=result.resource_id,
        action=result.action,
        vote_type=result.vote_type,
        weight=result.weight,
    )


@router.post("/", response_model=VoteResponse)
async def cast_vote(
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteResponse:
    """Cast a vote; repeating the same vote removes it, the opposite switches it."""
    try:
        result = voting.cast_vote(
            db,
            resource_id=vote_data.resource_id,
            voter=current_user,
            vote_type=vote_data.vote_type,
        )
    except ResourceNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    except VoteValidationError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return _as_response(result)


@router.delete("/{resource_id}", response_model=VoteResponse)
async def delete_vote(
    resource_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteResponse:
    """Remove the caller's vote on a resource."""
    try:
        result = voting.remove_vote(db, resource_id=resource_id, voter=current_user)
    except ResourceNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    return _as_response(result)


@router.get("/{resource_id}/my-vote", response_model=MyVoteResponse)
async def get_my_vote(
    resource_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MyVoteResponse:
    """Return the caller's current vote on a resource."""
    vote = voting.get_user_vote(db, resource_id, current_user.id)
    if vote is None:
        return MyVoteResponse(resource_id=resource_id)
    return MyVoteResponse(resource_id=resource_id, vote_type=vote.vote_type, weight=vote.weight)


@router.get("/{resource_id}/summary", response_model=VoteSummary)
async def get_vote_summary(resource_id: str, db: SessionDep) -> VoteSummary:
    """Return the live weighted-vote summary for a resource."""
    try:
        get_resource(db, resource_id)
        score = calculate_quality_score(db, resource_id)
    except ResourceNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    except ConfigurationError as err:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Scoring is not configured",
        ) from err
    return VoteSummary(
        resource_id=resource_id,
        upvotes=score.upvotes,
        downvotes=score.downvotes,
        weighted_score=score.weighted_score,
        voter_count=score.voter_count,
        should_auto_approve=score.should_auto_approve,
        should_auto_hide=score.should_auto_hide,
    )
