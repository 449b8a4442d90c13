"""User profile, role and favorites API routes."""

from fastapi import APIRouter, Body, Response, status

from src.api.deps import AdminUser, CurrentUser
from src.api.middleware.error_handler import NotFoundError
from src.schemas.common import MessageResponse
from src.schemas.user import (
    AuthUserResponse,
    FavoritesResponse,
    FavoriteToggleResponse,
    SetRoleRequest,
    UserCreate,
    UserCreatedResponse,
    UserProfileResponse,
)
from src.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/me",
    response_model=UserCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create my profile",
    description="Creates the caller's profile on first login. The first user becomes admin.",
    responses={200: {"description": "Profile already exists"}},
)
async def create_my_profile(
    user: CurrentUser,
    response: Response,
    data: UserCreate | None = Body(default=None),
) -> UserCreatedResponse:
    """Create the authenticated user's profile if it does not exist yet.

    A referral code in the body is applied silently; a bad code does not
    fail the request.
    """
    service = UserService()
    result = await service.create_profile(
        user_id=user.user_id,
        email=user.email,
        referral_code=data.referral_code if data else None,
    )

    if not result["created"]:
        response.status_code = status.HTTP_200_OK
        return UserCreatedResponse(message="User document already exists", role=result["role"])

    message = (
        "First user created with admin privileges"
        if result["role"] == "admin"
        else "User document created successfully"
    )
    return UserCreatedResponse(
        message=message,
        role=result["role"],
        referral_applied=result["referral_applied"],
    )


@router.get(
    "/me",
    response_model=UserProfileResponse,
    summary="Get my profile",
)
async def get_my_profile(user: CurrentUser) -> UserProfileResponse:
    """Get the authenticated user's profile.

    Raises:
        NotFoundError: 404 if the profile has not been created.
    """
    profile = await UserService().get_profile(user.user_id)
    if profile is None:
        raise NotFoundError("User not found")
    return UserProfileResponse.model_validate(profile)


@router.get(
    "",
    response_model=list[AuthUserResponse],
    summary="List users",
    description="Lists every user known to the auth provider. Admin only.",
)
async def list_users(admin: AdminUser) -> list[AuthUserResponse]:
    users = await UserService().list_users()
    return [AuthUserResponse.model_validate(u) for u in users]


@router.post(
    "/set-role",
    response_model=MessageResponse,
    summary="Set a user's role",
    description="Sets the role claim and profile role of a user. Admin only.",
)
async def set_role(data: SetRoleRequest, admin: AdminUser) -> MessageResponse:
    await UserService().set_role(data.uid, data.role)
    return MessageResponse(message=f"Successfully set role '{data.role}' for user {data.uid}")


@router.get(
    "/me/favorites",
    response_model=FavoritesResponse,
    summary="List my favorite businesses",
)
async def get_my_favorites(user: CurrentUser) -> FavoritesResponse:
    favorites = await UserService().get_favorites(user.user_id)
    return FavoritesResponse(favorites=favorites)


@router.post(
    "/me/favorites/{business_id}",
    response_model=FavoriteToggleResponse,
    summary="Toggle a favorite business",
    description="Adds the business to favorites, or removes it if already present.",
)
async def toggle_favorite(business_id: str, user: CurrentUser) -> FavoriteToggleResponse:
    is_favorite = await UserService().toggle_favorite(user.user_id, business_id, email=user.email)
    return FavoriteToggleResponse(business_id=business_id, is_favorite=is_favorite)
