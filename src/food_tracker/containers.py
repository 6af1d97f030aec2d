"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass

from food_tracker.adapters.sqlalchemy_calorie_repository import (
    SqlAlchemyCalorieRepository,
)
from food_tracker.adapters.sqlalchemy_consumed_entry_repository import (
    SqlAlchemyConsumedEntryRepository,
)
from food_tracker.adapters.sqlalchemy_database import Database
from food_tracker.adapters.sqlalchemy_product_repository import (
    SqlAlchemyProductRepository,
)
from food_tracker.app_logging import configure_logging
from food_tracker.config import Settings
from food_tracker.services.facade import DatabaseFacade


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    database: Database
    facade: DatabaseFacade
    close_resources: Callable[[], None]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    database = Database.create(
        resolved_settings.database_url, echo=resolved_settings.database_echo
    )
    database.create_schema()
    facade = DatabaseFacade(
        products=SqlAlchemyProductRepository(database),
        entries=SqlAlchemyConsumedEntryRepository(database),
        calories=SqlAlchemyCalorieRepository(database),
        transactions=database,
        most_common_limit=resolved_settings.most_common_limit,
    )

    def close_resources() -> None:
        database.dispose()

    return AppContainer(
        settings=resolved_settings,
        database=database,
        facade=facade,
        close_resources=close_resources,
    )
