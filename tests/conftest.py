"""Shared fixtures: in-memory catalog database, store and API client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from petfood_catalog import models  # noqa: F401
from petfood_catalog.config import Settings
from petfood_catalog.database import Base, get_db
from petfood_catalog.models import Brand, ProductIdentifier, ProductModel, ProductVariant
from petfood_catalog.services.catalog_store import CatalogStore


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def store(db_session):
    return CatalogStore(db_session)


@pytest.fixture(scope="function")
def settings():
    return Settings(_env_file=None)


@pytest.fixture(scope="function")
def make_product(db_session):
    """
    Seed a product line. Each variant is a dict with optional keys
    name, ingredients and identifiers [(type, value, is_primary, is_active)].
    """
    def _make(brand_name, product_name, variants=None):
        brand = db_session.query(Brand).filter(Brand.name == brand_name).first()
        if brand is None:
            brand = Brand(name=brand_name)
            db_session.add(brand)
            db_session.flush()

        model = ProductModel(brand_id=brand.id, name=product_name)
        db_session.add(model)
        db_session.flush()

        for entry in variants or []:
            variant = ProductVariant(
                model_id=model.id,
                name=entry.get("name"),
                ingredient_list_text=entry.get("ingredients"),
            )
            db_session.add(variant)
            db_session.flush()
            for identifier_type, value, is_primary, is_active in entry.get("identifiers", []):
                db_session.add(ProductIdentifier(
                    product_variant_id=variant.id,
                    identifier_type=identifier_type,
                    identifier_value=value,
                    is_primary=is_primary,
                    is_active=is_active,
                ))

        db_session.commit()
        return model

    return _make


@pytest.fixture(scope="function")
def client(db_session):
    from petfood_catalog.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
