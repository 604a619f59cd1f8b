from dependency_injector import containers, providers

from soundcoin.config import get_settings
from soundcoin.services.auth_service import AuthProviderClient
from soundcoin.services.player_service import PlayerSessionRegistry


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies that do not need a DB session."""

    config = providers.DependenciesContainer()

    auth_provider = providers.Singleton(AuthProviderClient, settings=config.config)
    player_sessions = providers.Singleton(PlayerSessionRegistry)


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "soundcoin.routers.auth_router",
            "soundcoin.deps",
        ],
    )

    config = providers.Container(ConfigModule)
    services = providers.Container(ServiceModule, config=config)
