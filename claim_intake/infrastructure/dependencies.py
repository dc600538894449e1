"""Dependency injection configuration for hexagonal architecture."""

import logging
from typing import Optional

from ..domain.ports.claim_store import ClaimStore
from ..domain.ports.media_storage import MediaStorage
from ..domain.ports.messaging_gateway import MessagingGateway
from ..domain.services.claim_registry import ClaimRegistry
from ..domain.services.command_handler import CommandHandler
from ..domain.services.fingerprinter import ContentFingerprinter
from ..domain.services.instance_recorder import InstanceRecorder
from ..domain.services.message_router import MessageRouter
from ..domain.services.response_catalog import ResponseCatalog
from ..domain.services.system_parameters import SystemParameters
from ..domain.services.type_policy import TypePolicy
from .media.local_storage import LocalMediaStorage
from .settings import IntakeSettings
from .storage.factory import StoreFactory
from .whatsapp.cloud_api_adapter import WhatsAppCloudAdapter, WhatsAppConfig

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Process-wide service state.

    Built once at startup (``start``), handed to the request handlers, and
    torn down at shutdown (``stop``). Components receive their collaborators
    from here instead of reaching for globals.
    """

    def __init__(
        self,
        settings: Optional[IntakeSettings] = None,
        store_factory: Optional[StoreFactory] = None,
        gateway: Optional[MessagingGateway] = None,
        media_storage: Optional[MediaStorage] = None,
    ):
        """Initialize service container.

        Args:
            settings: Service settings; read from the environment if omitted
            store_factory: Store backend factory
            gateway: WhatsApp gateway; the Cloud API adapter if omitted
            media_storage: Media storage; local files if omitted
        """
        self.settings = settings or IntakeSettings.from_env()
        self._store_factory = store_factory or StoreFactory()
        self._gateway = gateway
        self._media_storage = media_storage
        self._store: Optional[ClaimStore] = None
        self._router: Optional[MessageRouter] = None

    @property
    def is_started(self) -> bool:
        return self._router is not None

    @property
    def store(self) -> ClaimStore:
        if self._store is None:
            raise RuntimeError("Service container not started")
        return self._store

    @property
    def router(self) -> MessageRouter:
        if self._router is None:
            raise RuntimeError("Service container not started")
        return self._router

    async def start(self) -> None:
        """Create the store, adapters and domain services. Idempotent."""
        if self.is_started:
            return
        logger.info("🔧 Setting up service container...")
        settings = self.settings

        store_config = {}
        if settings.store_backend == "sql":
            store_config["database_url"] = settings.database_url
        self._store = await self._store_factory.create_store(settings.store_backend, **store_config)
        logger.info(f"✅ Store '{self._store.provider_name}' ready")

        if self._gateway is None:
            self._gateway = WhatsAppCloudAdapter(
                WhatsAppConfig(
                    token=settings.whatsapp_token,
                    phone_number_ids=settings.phone_number_ids,
                    api_version=settings.whatsapp_api_version,
                    base_url=settings.whatsapp_api_base_url,
                    timeout=settings.http_timeout,
                )
            )
        if self._media_storage is None:
            self._media_storage = LocalMediaStorage(settings.media_storage_dir)

        parameters = SystemParameters(self._store.parameter_store(), ttl=settings.policy_cache_ttl)
        responses = ResponseCatalog(parameters)
        registry = ClaimRegistry(self._store)
        recorder = InstanceRecorder(self._store)

        command_handler = None
        if settings.enable_debug_commands:
            command_handler = CommandHandler(self._gateway, registry, recorder, responses)

        self._router = MessageRouter(
            type_policy=TypePolicy(parameters),
            responses=responses,
            fingerprinter=ContentFingerprinter(),
            registry=registry,
            recorder=recorder,
            gateway=self._gateway,
            media_storage=self._media_storage,
            command_handler=command_handler,
        )
        logger.info("✅ Service container setup completed")

    async def stop(self) -> None:
        """Flush background uploads and release every resource."""
        if self._router is not None:
            await self._router.drain_uploads()
            self._router = None
        if self._gateway is not None:
            await self._gateway.shutdown()
        await self._store_factory.shutdown_all()
        self._store = None
        logger.info("👋 Service container stopped")

    def health(self) -> dict:
        return {
            "started": self.is_started,
            "store_backend": self.settings.store_backend,
            "stores": self._store_factory.available_stores,
            "debug_commands": self.settings.enable_debug_commands,
        }
