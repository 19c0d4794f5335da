from fastapi import APIRouter, Request

from ticketing.dependencies import AuthContext, UserServiceDep
from ticketing.responses import DataResponse, MessageResponse
from ticketing.users.schemas import LoginRequest, ProfileResponse, SignupRequest, TokenResponse
from ticketing.validation import parse_body

router = APIRouter()


@router.post("/signup", status_code=201, response_model=MessageResponse[ProfileResponse])
async def signup(request: Request, service: UserServiceDep) -> MessageResponse[ProfileResponse]:
    data = await parse_body(request, SignupRequest)
    result = await service.signup(data)
    return MessageResponse(data=result.unwrap(), message="Account created successfully")


@router.post("/login", response_model=DataResponse[TokenResponse])
async def login(request: Request, service: UserServiceDep) -> DataResponse[TokenResponse]:
    data = await parse_body(request, LoginRequest)
    return DataResponse(data=await service.login(data))


@router.get("/me", response_model=DataResponse[ProfileResponse])
async def me(ctx: AuthContext, service: UserServiceDep) -> DataResponse[ProfileResponse]:
    return DataResponse(data=await service.get_profile(ctx.user.id))
