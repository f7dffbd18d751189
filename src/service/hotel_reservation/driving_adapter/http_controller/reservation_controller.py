from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import PlainTextResponse
from opentelemetry import trace

from src.platform.exception.exceptions import InvalidArgumentError
from src.platform.logging.loguru_io import Logger
from src.service.hotel_reservation.app.command.create_reservation_use_case import (
    CreateReservationUseCase,
)
from src.service.hotel_reservation.app.command.delete_reservation_use_case import (
    DeleteReservationUseCase,
)
from src.service.hotel_reservation.app.command.upsert_reservation_use_case import (
    UpsertReservationUseCase,
)
from src.service.hotel_reservation.app.query.get_reservation_use_case import (
    GetReservationUseCase,
)
from src.service.hotel_reservation.app.query.list_reservations_use_case import (
    ListReservationsUseCase,
)
from src.service.hotel_reservation.driving_adapter.http_controller.schema.reservation_schema import (
    ReservationRequest,
    ReservationResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get('', response_model=List[ReservationResponse])
@Logger.io
async def list_reservations(
    use_case: ListReservationsUseCase = Depends(ListReservationsUseCase.depends),
) -> List[ReservationResponse]:
    reservations = await use_case.list_all()
    return [ReservationResponse.from_entity(reservation) for reservation in reservations]


@router.post('', status_code=status.HTTP_201_CREATED, response_class=PlainTextResponse)
@Logger.io
async def create_reservation(
    request: Request,
    body: ReservationRequest,
    use_case: CreateReservationUseCase = Depends(CreateReservationUseCase.depends),
) -> PlainTextResponse:
    with tracer.start_as_current_span('controller.create_reservation') as span:
        span.set_attribute('hotel_id', body.hotel_id)

        confirmation_number = await use_case.create(reservation=body.to_entity())

        span.set_attribute('confirmation_number', confirmation_number)
        location = str(request.url_for('get_reservation', confirmation_number=confirmation_number))
        return PlainTextResponse(
            content=confirmation_number,
            status_code=status.HTTP_201_CREATED,
            headers={'Location': location},
        )


# Declared before /{confirmation_number} so the literal path wins
@router.get('/findByHotelAndDate', response_model=List[ReservationResponse])
@Logger.io
async def find_by_hotel_and_date(
    hotel_id: str = Query('', alias='hotelId'),
    start_date: date = Query(..., alias='date'),
    use_case: ListReservationsUseCase = Depends(ListReservationsUseCase.depends),
) -> List[ReservationResponse]:
    """hotelId missing or empty -> 400, like a malformed date."""
    if not hotel_id:
        raise InvalidArgumentError('hotelId should not be null nor empty')
    reservations = await use_case.list_by_hotel_and_date(hotel_id=hotel_id, start_date=start_date)
    return [ReservationResponse.from_entity(reservation) for reservation in reservations]


@router.get('/{confirmation_number}', response_model=ReservationResponse)
@Logger.io
async def get_reservation(
    confirmation_number: str,
    use_case: GetReservationUseCase = Depends(GetReservationUseCase.depends),
) -> ReservationResponse:
    reservation = await use_case.get_reservation(confirmation_number=confirmation_number)
    return ReservationResponse.from_entity(reservation)


@router.put('/{confirmation_number}')
@Logger.io
async def upsert_reservation(
    request: Request,
    confirmation_number: str,
    body: ReservationRequest,
    use_case: UpsertReservationUseCase = Depends(UpsertReservationUseCase.depends),
) -> Response:
    stored_as, created = await use_case.upsert(
        confirmation_number=confirmation_number, reservation=body.to_entity()
    )
    if created:
        location = str(request.url_for('get_reservation', confirmation_number=stored_as))
        return Response(status_code=status.HTTP_201_CREATED, headers={'Location': location})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete('/{confirmation_number}', status_code=status.HTTP_204_NO_CONTENT)
@Logger.io
async def delete_reservation(
    confirmation_number: str,
    use_case: DeleteReservationUseCase = Depends(DeleteReservationUseCase.depends),
) -> Response:
    await use_case.delete(confirmation_number=confirmation_number)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
