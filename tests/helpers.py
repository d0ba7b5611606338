from decimal import Decimal

from sqlalchemy.orm import sessionmaker

from app.database import Base, create_app_engine
from app.models import import_all_models
from app.schemas.medication import MedicationCreate
from app.services.medication_service import create_medication


def make_session_factory(database_url="sqlite:///:memory:"):
    import_all_models()
    engine = create_app_engine(database_url)
    Base.metadata.create_all(bind=engine)
    return engine, sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def register(db, name="Amoxicillin", quantity=10, min_stock_level=10, **fields):
    payload = MedicationCreate(
        name=name,
        quantity=quantity,
        min_stock_level=min_stock_level,
        unit_price=fields.pop("unit_price", Decimal("1.50")),
        **fields,
    )
    return create_medication(db, payload)
