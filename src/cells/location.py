import logging

from sqlalchemy.exc import SQLAlchemyError

from src.db.database import CellDB
from src.errors import InvalidInputError, NotFoundError, RemoteFailure

logger = logging.getLogger(__name__)


def save_cell_location(db, cell_id, address, coordinates, number=None):
    """
    Store the address and map position of a cell.

    Args:
        db: SQLAlchemy session
        cell_id: Cell to update
        address: Address resolved from the CEP or typed by hand
        coordinates: Coordinates from the resolver or a click on the map
        number: Optional house number

    Returns:
        The updated CellDB row
    """
    if coordinates is None:
        raise InvalidInputError("Selecione um ponto no mapa")

    try:
        cell = db.query(CellDB).filter(CellDB.id == cell_id).first()
        if not cell:
            raise NotFoundError("Célula não encontrada", f"No cell with id {cell_id}")

        cell.address = address.street
        cell.number = number or None
        cell.neighborhood = address.neighborhood or None
        cell.city = address.city or None
        cell.state = address.state or None
        cell.latitude = coordinates.latitude
        cell.longitude = coordinates.longitude
        db.commit()
        db.refresh(cell)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving location for cell {cell_id}: {e}")
        raise RemoteFailure("Erro ao salvar", str(e)) from e

    logger.info(f"Location of cell {cell_id} set to ({cell.latitude}, {cell.longitude})")
    return cell
