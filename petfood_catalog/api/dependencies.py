"""Shared FastAPI dependencies"""
from fastapi import Depends
from sqlalchemy.orm import Session
from petfood_catalog.config import get_settings
from petfood_catalog.database import get_db
from petfood_catalog.services.catalog_store import CatalogStore


def get_store(db: Session = Depends(get_db)) -> CatalogStore:
    return CatalogStore(db, timeout_seconds=get_settings().store_timeout_seconds)
