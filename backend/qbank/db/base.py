"""Declarative Base — metadata shared by the questions and question_upvotes tables.

Invariants:
    - Primary, foreign and unique keys get deterministic names from NAMING_CONVENTION
    - Check constraints and indexes are named explicitly in each model's __table_args__
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
