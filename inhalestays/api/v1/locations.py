"""Location hierarchy endpoints (State -> City -> Area)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.api.deps import get_current_admin, get_db
from inhalestays.core.exceptions import NotFoundError, ValidationError
from inhalestays.models.location import Area, City, State
from inhalestays.models.user import User
from inhalestays.schemas.location import LocationCreate, LocationResponse

router = APIRouter()


@router.get("/states", response_model=list[LocationResponse])
async def list_states(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[State]:
    """List active states."""
    result = await db.execute(
        select(State).where(State.is_active.is_(True)).order_by(State.name)
    )
    return list(result.scalars().all())


@router.post("/states", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def create_state(
    location: LocationCreate,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> State:
    """Create a state."""
    existing = await db.execute(select(State.id).where(State.name == location.name))
    if existing.scalar_one_or_none():
        raise ValidationError(f"State '{location.name}' already exists")

    state = State(name=location.name)
    db.add(state)
    await db.flush()
    return state


@router.get("/states/{state_id}/cities", response_model=list[LocationResponse])
async def list_cities(
    state_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[City]:
    """List active cities in a state."""
    if not await db.get(State, state_id):
        raise NotFoundError("State", str(state_id))
    result = await db.execute(
        select(City)
        .where(City.state_id == state_id, City.is_active.is_(True))
        .order_by(City.name)
    )
    return list(result.scalars().all())


@router.post(
    "/states/{state_id}/cities",
    response_model=LocationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_city(
    state_id: UUID,
    location: LocationCreate,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> City:
    """Create a city in a state."""
    if not await db.get(State, state_id):
        raise NotFoundError("State", str(state_id))
    existing = await db.execute(
        select(City.id).where(City.state_id == state_id, City.name == location.name)
    )
    if existing.scalar_one_or_none():
        raise ValidationError(f"City '{location.name}' already exists in this state")

    city = City(state_id=state_id, name=location.name)
    db.add(city)
    await db.flush()
    return city


@router.get("/cities/{city_id}/areas", response_model=list[LocationResponse])
async def list_areas(
    city_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Area]:
    """List active areas in a city."""
    if not await db.get(City, city_id):
        raise NotFoundError("City", str(city_id))
    result = await db.execute(
        select(Area)
        .where(Area.city_id == city_id, Area.is_active.is_(True))
        .order_by(Area.name)
    )
    return list(result.scalars().all())


@router.post(
    "/cities/{city_id}/areas",
    response_model=LocationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_area(
    city_id: UUID,
    location: LocationCreate,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Area:
    """Create an area in a city."""
    if not await db.get(City, city_id):
        raise NotFoundError("City", str(city_id))
    existing = await db.execute(
        select(Area.id).where(Area.city_id == city_id, Area.name == location.name)
    )
    if existing.scalar_one_or_none():
        raise ValidationError(f"Area '{location.name}' already exists in this city")

    area = Area(city_id=city_id, name=location.name)
    db.add(area)
    await db.flush()
    return area
