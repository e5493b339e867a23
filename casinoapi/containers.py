from dependency_injector import containers, providers

from casinoapi.config import Settings
from casinoapi.services.notifier import LoggingBalanceNotifier, RedisBalanceNotifier
from casinoapi.services.promotion_service import PromotionService
from casinoapi.services.wallet_service import WalletService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)


class NotifierModule(containers.DeclarativeContainer):
    """Post-commit balance notifiers, selected by BALANCE_NOTIFIER."""

    config = providers.DependenciesContainer()

    balance_notifier = providers.Selector(
        providers.Callable(lambda settings: settings.BALANCE_NOTIFIER, config.config),
        log=providers.Singleton(LoggingBalanceNotifier),
        redis=providers.Singleton(RedisBalanceNotifier, settings=config.config),
    )


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies. `db` is supplied per request."""

    config = providers.DependenciesContainer()
    notifiers = providers.DependenciesContainer()

    wallet_service = providers.Factory(
        WalletService, settings=config.config, notifier=notifiers.balance_notifier
    )
    promotion_service = providers.Factory(PromotionService, settings=config.config)


class Container(containers.DeclarativeContainer):
    """Application container."""

    config = providers.Container(ConfigModule)
    notifiers = providers.Container(NotifierModule, config=config)
    services = providers.Container(
        ServiceModule, config=config, notifiers=notifiers
    )
