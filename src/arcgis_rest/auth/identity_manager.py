"""ArcGIS identity manager.

Authenticates requests to ArcGIS Online and ArcGIS Enterprise. Keeps the home
portal token fresh, negotiates tokens for federated servers and makes sure
concurrent callers share a single in-flight token request per portal or
server.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import urlencode

from arcgis_rest.auth.models.credential import Credential, IdentityRecord, ServerInfo
from arcgis_rest.auth.models.errors import (
    ArcGISTokenRequestError,
    TokenRequestErrorCode,
)
from arcgis_rest.auth.models.flow import (
    DEFAULT_PORTAL,
    DEFAULT_TOKEN_DURATION,
    OAuth2Options,
)
from arcgis_rest.auth.models.tokens import (
    ServerToken,
    ensure_utc,
    from_epoch_ms,
    is_expired,
    to_epoch_ms,
    utc_now,
)
from arcgis_rest.auth.primitives.federation import (
    can_use_online_token,
    get_server_root_url,
    is_federated,
)
from arcgis_rest.auth.services.flow import AuthorizationHandler, OAuth2FlowManager
from arcgis_rest.auth.services.tokens import (
    fetch_token,
    generate_token,
    revoke_token,
    validate_app_access,
)
from arcgis_rest.request.errors import ArcGISAuthError, ArcGISRequestError
from arcgis_rest.request.params import clean_url
from arcgis_rest.request.transport import (
    CredentialsPolicy,
    HttpxTransport,
    RequestOptions,
    Transport,
)

logger = logging.getLogger(__name__)

DEFAULT_REFERER = "arcgis-rest-python"
SERVER_TOKEN_EXPIRY_MARGIN = timedelta(minutes=5)
REFRESH_TOKEN_RENEWAL_WINDOW = timedelta(days=1)
CREDENTIAL_DEFAULT_LIFETIME = timedelta(hours=2)


class ArcGISIdentityManager:
    """Authenticates ArcGIS Online and ArcGIS Enterprise users.

    Prefer one of the construction helpers over calling the constructor
    directly:

    - ``sign_in`` for username/password authentication (CLI tools, scripts)
    - ``authorize_url`` and ``exchange_authorization_code`` for server-side
      OAuth 2.0
    - ``begin_oauth2`` for interactive OAuth 2.0 with PKCE
    - ``from_token`` for a token obtained elsewhere
    - ``from_credential`` for a platform-native credential
    - ``deserialize`` for a record created with ``serialize``

    The manager mutates its own token state when credentials are refreshed;
    ``update_token`` is the only external write path.
    """

    def __init__(
        self,
        *,
        portal: str | None = None,
        client_id: str | None = None,
        redirect_uri: str | None = None,
        username: str | None = None,
        password: str | None = None,
        token: str | None = None,
        token_expires: datetime | None = None,
        refresh_token: str | None = None,
        refresh_token_expires: datetime | None = None,
        token_duration: int | None = None,
        ssl: bool | None = None,
        provider: str = "arcgis",
        server: str | None = None,
        referer: str = DEFAULT_REFERER,
        transport: Transport | None = None,
    ):
        """Initialize the identity manager.

        Args:
            portal: Home portal REST URL, defaults to ArcGIS Online
            client_id: OAuth application client id
            redirect_uri: OAuth redirect URI registered for the application
            username: Username for direct sign in
            password: Password for direct sign in
            token: Current access token
            token_expires: Expiry of ``token``
            refresh_token: OAuth refresh token
            refresh_token_expires: Expiry of ``refresh_token``
            token_duration: Requested token lifetime in minutes
            ssl: Whether the portal requires https
            provider: ``"arcgis"`` or a social login provider
            server: Single ArcGIS Server this manager is scoped to. It is
                trusted even though it is not federated.
            referer: Referer sent with ``generateToken`` requests
            transport: Transport for all requests, defaults to ``HttpxTransport``
        """
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.password = password
        self.portal = clean_url(portal) if portal else DEFAULT_PORTAL
        self.ssl = ssl
        self.provider = provider
        self.token_duration = token_duration or DEFAULT_TOKEN_DURATION
        self.server = server
        self.referer = referer

        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpxTransport()

        self._username = username
        self._token = token
        self._token_expires = ensure_utc(token_expires)
        self._refresh_token = refresh_token
        self._refresh_token_expires = ensure_utc(refresh_token_expires)

        self.federated_servers: dict[str, ServerToken] = {}
        self.trusted_domains: list[str] = []
        self._pending_token_requests: dict[str, asyncio.Task[str]] = {}

        self._user: dict[str, Any] | None = None
        self._portal_info: dict[str, Any] | None = None
        self._pending_user_request: asyncio.Task[dict[str, Any]] | None = None
        self._pending_portal_request: asyncio.Task[dict[str, Any]] | None = None

        # An explicitly passed server is trusted even if it is not federated
        if server:
            root = self.get_server_root_url(server)
            self.federated_servers[root] = ServerToken(token, self._token_expires)

    @property
    def token(self) -> str | None:
        """The current portal (or single server) token."""
        return self._token

    @property
    def token_expires(self) -> datetime | None:
        return self._token_expires

    @property
    def refresh_token(self) -> str | None:
        return self._refresh_token

    @property
    def refresh_token_expires(self) -> datetime | None:
        return self._refresh_token_expires

    @property
    def username(self) -> str | None:
        """The authenticated user, falling back to the cached user record."""
        if self._username:
            return self._username
        if self._user and self._user.get("username"):
            return self._user["username"]
        return None

    @property
    def can_refresh(self) -> bool:
        """Check if these credentials can be refreshed."""
        if self.username and self.password:
            return True
        return bool(self.client_id and self.refresh_token and self.redirect_uri)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    async def sign_in(
        cls, username: str, password: str, **kwargs: Any
    ) -> ArcGISIdentityManager:
        """Sign in with a username and password.

        Intended only for applications without a user interface such as CLI
        tools. The credentials are validated by fetching the current user.
        """
        manager = cls(username=username, password=password, **kwargs)
        return await cls._validated(manager)

    @classmethod
    async def from_token(cls, token: str, **kwargs: Any) -> ArcGISIdentityManager:
        """Create a manager from a token obtained elsewhere and validate it."""
        manager = cls(token=token, **kwargs)
        return await cls._validated(manager)

    @staticmethod
    async def _validated(manager: ArcGISIdentityManager) -> ArcGISIdentityManager:
        try:
            await manager.get_user()
        except Exception:
            await manager.close()
            raise
        return manager

    @staticmethod
    def authorize_url(options: OAuth2Options) -> str:
        """Build the URL to redirect a user to for server-side OAuth 2.0."""
        params = {
            "client_id": options.client_id,
            "expiration": options.expiration,
            "response_type": "code",
            "redirect_uri": options.redirect_uri,
        }
        if options.state:
            params["state"] = options.state
        return f"{clean_url(options.portal)}/oauth2/authorize?{urlencode(params)}"

    @classmethod
    async def exchange_authorization_code(
        cls,
        options: OAuth2Options,
        authorization_code: str,
        transport: Transport | None = None,
    ) -> ArcGISIdentityManager:
        """Complete server-side OAuth 2.0 by exchanging the authorization code.

        Raises:
            ArcGISTokenRequestError: REFRESH_TOKEN_EXCHANGE_FAILED if the
                exchange fails
        """
        manager_transport = transport or HttpxTransport()
        portal = clean_url(options.portal)

        try:
            response = await fetch_token(
                manager_transport,
                f"{portal}/oauth2/token",
                {
                    "grant_type": "authorization_code",
                    "client_id": options.client_id,
                    "redirect_uri": options.redirect_uri,
                    "code": authorization_code,
                },
            )
        except ArcGISRequestError as e:
            if transport is None:
                await manager_transport.close()
            raise ArcGISTokenRequestError(
                e.message,
                TokenRequestErrorCode.REFRESH_TOKEN_EXCHANGE_FAILED,
                e.response,
                e.url,
                e.options,
            ) from e

        manager = cls(
            client_id=options.client_id,
            portal=portal,
            ssl=response.ssl,
            redirect_uri=options.redirect_uri,
            refresh_token=response.refresh_token,
            refresh_token_expires=response.refresh_token_expires,
            token=response.token,
            token_expires=response.expires,
            username=response.username,
            transport=manager_transport,
        )
        manager._owns_transport = transport is None
        return manager

    @classmethod
    async def begin_oauth2(
        cls,
        options: OAuth2Options,
        handler: AuthorizationHandler,
        transport: Transport | None = None,
    ) -> ArcGISIdentityManager:
        """Run an interactive OAuth 2.0 authorization code flow with PKCE.

        The handler shows the authorization page to the user and returns the
        URL the authorization server redirected back to.

        Raises:
            ArcGISAccessDeniedError: If the user declined the request
            ArcGISAuthError: If the callback is invalid or the code exchange
                fails
        """
        flow_manager = OAuth2FlowManager()
        auth_url, pkce_params, state = flow_manager.start_authorization_flow(options)

        callback_url = await handler.handle_authorization(auth_url)
        code = flow_manager.handle_authorization_callback(callback_url, state)

        manager_transport = transport or HttpxTransport()
        portal = clean_url(options.portal)
        try:
            response = await fetch_token(
                manager_transport,
                f"{portal}/oauth2/token",
                {
                    "client_id": options.client_id,
                    "code_verifier": pkce_params.code_verifier,
                    "grant_type": "authorization_code",
                    "redirect_uri": options.redirect_uri,
                    "code": code,
                },
            )
        except ArcGISRequestError as e:
            if transport is None:
                await manager_transport.close()
            raise ArcGISAuthError(e.original_message, e.code) from e

        logger.info(f"Completed OAuth 2.0 sign in for client {options.client_id}")

        manager = cls(
            client_id=options.client_id,
            portal=portal,
            provider=options.provider,
            ssl=response.ssl,
            token=response.token,
            token_expires=response.expires,
            username=response.username,
            refresh_token=response.refresh_token,
            refresh_token_expires=response.refresh_token_expires,
            redirect_uri=options.redirect_uri,
            transport=manager_transport,
        )
        manager._owns_transport = transport is None
        return manager

    @classmethod
    def from_credential(
        cls,
        credential: Credential | dict[str, Any],
        server_info: ServerInfo | dict[str, Any],
        transport: Transport | None = None,
    ) -> ArcGISIdentityManager:
        """Translate a platform-native credential into a manager.

        Newer credentials may omit ``ssl`` and ``expires``; they default to
        ``True`` and two hours from now.
        """
        credential = Credential.model_validate(credential)
        server_info = ServerInfo.model_validate(server_info)

        ssl = credential.ssl if credential.ssl is not None else True
        expires = (
            from_epoch_ms(credential.expires)
            if credential.expires
            else utc_now() + CREDENTIAL_DEFAULT_LIFETIME
        )

        if server_info.has_server:
            return cls(
                server=credential.server,
                ssl=ssl,
                token=credential.token,
                username=credential.user_id,
                token_expires=expires,
                transport=transport,
            )

        portal = (
            credential.server
            if "sharing/rest" in credential.server
            else f"{clean_url(credential.server)}/sharing/rest"
        )
        return cls(
            portal=portal,
            ssl=ssl,
            token=credential.token,
            username=credential.user_id,
            token_expires=expires,
            transport=transport,
        )

    def to_credential(self) -> dict[str, Any]:
        """Return authentication in the platform-native credential format."""
        return {
            "expires": to_epoch_ms(self.token_expires) if self.token_expires else None,
            "server": self.server or self.portal,
            "ssl": self.ssl,
            "token": self.token,
            "userId": self.username,
        }

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_json(self) -> dict[str, Any]:
        """Persistent state as a camelCase record. Dates are epoch ms."""
        record = IdentityRecord(
            client_id=self.client_id,
            refresh_token=self.refresh_token,
            refresh_token_expires=(
                to_epoch_ms(self.refresh_token_expires)
                if self.refresh_token_expires
                else None
            ),
            username=self.username,
            password=self.password,
            token=self.token,
            token_expires=to_epoch_ms(self.token_expires) if self.token_expires else None,
            portal=self.portal,
            ssl=self.ssl,
            token_duration=self.token_duration,
            redirect_uri=self.redirect_uri,
            server=self.server,
        )
        return record.to_dict()

    def serialize(self) -> str:
        return json.dumps(self.to_json())

    @classmethod
    def deserialize(
        cls, data: str | dict[str, Any], transport: Transport | None = None
    ) -> ArcGISIdentityManager:
        """Recreate a manager from ``serialize`` output without network calls."""
        record = IdentityRecord.model_validate(
            json.loads(data) if isinstance(data, str) else data
        )
        return cls(
            client_id=record.client_id,
            refresh_token=record.refresh_token,
            refresh_token_expires=(
                from_epoch_ms(record.refresh_token_expires)
                if record.refresh_token_expires
                else None
            ),
            username=record.username,
            password=record.password,
            token=record.token,
            token_expires=(
                from_epoch_ms(record.token_expires) if record.token_expires else None
            ),
            portal=record.portal,
            ssl=record.ssl,
            token_duration=record.token_duration,
            redirect_uri=record.redirect_uri,
            server=record.server,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Portal metadata
    # ------------------------------------------------------------------

    async def get_user(self) -> dict[str, Any]:
        """Return the current user. Later calls do not hit the network."""
        if self._user is not None:
            return self._user
        if self._pending_user_request is None:
            self._pending_user_request = asyncio.create_task(self._fetch_user())
        return await asyncio.shield(self._pending_user_request)

    async def get_portal(self) -> dict[str, Any]:
        """Return the current user's portal. Later calls do not hit the network."""
        if self._portal_info is not None:
            return self._portal_info
        if self._pending_portal_request is None:
            self._pending_portal_request = asyncio.create_task(
                self._fetch_portal_info()
            )
        return await asyncio.shield(self._pending_portal_request)

    async def _fetch_user(self) -> dict[str, Any]:
        try:
            self._user = await self.transport.request(
                f"{self.portal}/community/self",
                RequestOptions(http_method="GET", authentication=self),
            )
            return self._user
        finally:
            self._pending_user_request = None

    async def _fetch_portal_info(self) -> dict[str, Any]:
        try:
            self._portal_info = await self.transport.request(
                f"{self.portal}/portals/self",
                RequestOptions(http_method="GET", authentication=self),
            )
            return self._portal_info
        finally:
            self._pending_portal_request = None

    async def get_username(self) -> str | None:
        if self.username:
            return self.username
        user = await self.get_user()
        return user.get("username")

    async def validate_app_access(self, client_id: str) -> dict[str, Any]:
        """Check whether the current user may access the application ``client_id``."""
        token = await self.get_token(self.portal)
        return await validate_app_access(self.transport, token, client_id, self.portal)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    async def get_token(self, url: str) -> str | None:
        """Return the token to use for a request to ``url``.

        Requests to the home portal, or to the same ArcGIS Online environment,
        use the portal token. Any other URL is treated as a federated server.
        """
        if can_use_online_token(self.portal, url):
            return await self.get_fresh_token()
        if self.portal.lower() in url.lower():
            return await self.get_fresh_token()
        return await self.get_token_for_server(url)

    async def get_fresh_token(self) -> str | None:
        """Return an unexpired portal token, refreshing it first if needed."""
        if self.token and not is_expired(self.token_expires):
            return self.token
        return await self._join_pending(self.portal, self._refresh_portal_token)

    async def _refresh_portal_token(self) -> str | None:
        await self.refresh_credentials()
        return self.token

    async def get_token_for_server(self, url: str) -> str:
        """Return a token for a federated or explicitly trusted server.

        Uses the ``federated_servers`` cache first and otherwise validates the
        server against the home portal before generating a token for it.

        Raises:
            ArcGISTokenRequestError: NOT_FEDERATED,
                GENERATE_TOKEN_FOR_SERVER_FAILED or TOKEN_REFRESH_FAILED
        """
        root = self.get_server_root_url(url)
        existing = self.federated_servers.get(root)
        if existing is not None and existing.is_valid():
            logger.debug(f"Using cached token for {root}")
            return existing.token

        return await self._join_pending(
            root, lambda: self._negotiate_server_token(url, root)
        )

    async def _join_pending(
        self, key: str, operation: Callable[[], Awaitable[str | None]]
    ) -> str | None:
        """Await the in-flight token request for ``key``, starting one if needed.

        The entry is inserted before the first suspension point and removed by
        the task itself once it settles.
        """
        task = self._pending_token_requests.get(key)
        if task is None:
            task = asyncio.create_task(self._settle_pending(key, operation()))
            self._pending_token_requests[key] = task
        else:
            logger.debug(f"Joining pending token request for {key}")
        return await asyncio.shield(task)

    async def _settle_pending(self, key: str, operation: Awaitable[str | None]) -> str | None:
        try:
            return await operation
        finally:
            self._pending_token_requests.pop(key, None)

    async def _negotiate_server_token(self, url: str, root: str) -> str:
        try:
            await self.fetch_authorized_domains()

            server_info = await self.transport.request(
                f"{root.rstrip('/')}/rest/info",
                RequestOptions(
                    http_method="GET", credentials=self.get_domain_credentials(url)
                ),
            )

            owning_system_url = server_info.get("owningSystemUrl")
            if owning_system_url:
                # A server owned by another portal will never accept our token
                if not is_federated(owning_system_url, self.portal):
                    logger.warning(f"{url} is not federated with {self.portal}")
                    raise ArcGISTokenRequestError(
                        f"{url} is not federated with {self.portal}.",
                        TokenRequestErrorCode.NOT_FEDERATED,
                    )
                owner_info = await self.transport.request(
                    f"{clean_url(owning_system_url)}/sharing/rest/info",
                    RequestOptions(http_method="GET"),
                )
                auth_info = owner_info.get("authInfo") or {}
            elif server_info.get("authInfo") and root in self.federated_servers:
                # Stand-alone ArcGIS Server passed explicitly to the constructor
                auth_info = server_info["authInfo"]
            else:
                logger.warning(f"{url} is not federated and not explicitly trusted")
                raise ArcGISTokenRequestError(
                    f"{url} is not federated with any portal and is not explicitly trusted.",
                    TokenRequestErrorCode.NOT_FEDERATED,
                )

            # An expired portal token cannot be used to generate a server token
            if self.token and is_expired(self.token_expires):
                if self.server:
                    await self.refresh_credentials()
                    server_token = ServerToken(self.token, self.token_expires)
                else:
                    # Shares the portal slot with get_fresh_token and other roots
                    await self._join_pending(self.portal, self._refresh_portal_token)
                    server_token = await self.generate_token_for_server(
                        self._token_services_url(auth_info, url), root
                    )
            else:
                server_token = await self.generate_token_for_server(
                    self._token_services_url(auth_info, url), root
                )
        except ArcGISTokenRequestError:
            raise
        except ArcGISRequestError as e:
            raise ArcGISTokenRequestError(
                e.message,
                TokenRequestErrorCode.GENERATE_TOKEN_FOR_SERVER_FAILED,
                e.response,
                e.url,
                e.options,
            ) from e

        self.federated_servers[root] = server_token
        logger.info(f"Obtained token for server {root}")
        return server_token.token

    def _token_services_url(self, auth_info: dict[str, Any], url: str) -> str:
        token_services_url = auth_info.get("tokenServicesUrl")
        if not token_services_url:
            raise ArcGISTokenRequestError(
                f"{url} does not advertise a token service.",
                TokenRequestErrorCode.GENERATE_TOKEN_FOR_SERVER_FAILED,
                auth_info,
            )
        return token_services_url

    async def generate_token_for_server(
        self, token_services_url: str, server_url: str
    ) -> ServerToken:
        """Exchange the portal token for a token valid on ``server_url``.

        The reported expiry is reduced by five minutes.

        Raises:
            ArcGISTokenRequestError: GENERATE_TOKEN_FOR_SERVER_FAILED
        """
        try:
            response = await generate_token(
                self.transport,
                token_services_url,
                {
                    "token": self.token,
                    "serverUrl": server_url,
                    "expiration": self.token_duration,
                },
            )
        except ArcGISRequestError as e:
            raise ArcGISTokenRequestError(
                e.message,
                TokenRequestErrorCode.GENERATE_TOKEN_FOR_SERVER_FAILED,
                e.response,
                e.url,
                e.options,
            ) from e

        return ServerToken(
            token=response["token"],
            expires=from_epoch_ms(response["expires"]) - SERVER_TOKEN_EXPIRY_MARGIN,
        )

    async def refresh_credentials(self) -> ArcGISIdentityManager:
        """Refresh ``token`` and ``token_expires``.

        Raises:
            ArcGISTokenRequestError: TOKEN_REFRESH_FAILED or
                REFRESH_TOKEN_EXCHANGE_FAILED
        """
        # make sure later get_user() and get_portal() calls don't return stale metadata
        self._user = None
        self._portal_info = None

        if self.username and self.password:
            return await self.refresh_with_username_and_password()
        if self.client_id and self.refresh_token:
            return await self.refresh_with_refresh_token()

        raise ArcGISTokenRequestError(
            "Unable to refresh token. No refresh token or password present.",
            TokenRequestErrorCode.TOKEN_REFRESH_FAILED,
        )

    async def refresh_with_username_and_password(self) -> ArcGISIdentityManager:
        """Refresh the token with ``username`` and ``password``."""
        params = {
            "username": self.username,
            "password": self.password,
            "expiration": self.token_duration,
            "client": "referer",
            "referer": self.referer,
        }

        try:
            if self.server:
                root = self.get_server_root_url(self.server)
                server_info = await self.transport.request(
                    f"{root.rstrip('/')}/rest/info", RequestOptions(http_method="GET")
                )
                token_url = (server_info.get("authInfo") or {}).get("tokenServicesUrl")
                if not token_url:
                    raise ArcGISTokenRequestError(
                        f"{self.server} does not advertise a token service.",
                        TokenRequestErrorCode.TOKEN_REFRESH_FAILED,
                        server_info,
                    )
            else:
                token_url = f"{self.portal}/generateToken"

            response = await generate_token(self.transport, token_url, params)
        except ArcGISRequestError as e:
            raise ArcGISTokenRequestError(
                e.message,
                TokenRequestErrorCode.TOKEN_REFRESH_FAILED,
                e.response,
                e.url,
                e.options,
            ) from e

        self.update_token(response["token"], from_epoch_ms(response["expires"]))
        logger.info(f"Refreshed token for {self.username}")
        return self

    async def refresh_with_refresh_token(self) -> ArcGISIdentityManager:
        """Refresh the token with ``refresh_token``.

        A refresh token that expires within a day is exchanged for a new one
        instead.
        """
        if (
            self.refresh_token
            and self.refresh_token_expires
            and self.refresh_token_expires - REFRESH_TOKEN_RENEWAL_WINDOW < utc_now()
        ):
            return await self.exchange_refresh_token()

        try:
            response = await fetch_token(
                self.transport,
                f"{self.portal}/oauth2/token",
                {
                    "client_id": self.client_id,
                    "refresh_token": self.refresh_token,
                    "grant_type": "refresh_token",
                },
            )
        except ArcGISRequestError as e:
            raise ArcGISTokenRequestError(
                e.message,
                TokenRequestErrorCode.TOKEN_REFRESH_FAILED,
                e.response,
                e.url,
                e.options,
            ) from e

        self.update_token(response.token, response.expires)
        logger.info("Refreshed token with refresh token")
        return self

    async def exchange_refresh_token(self) -> ArcGISIdentityManager:
        """Exchange the refresh token for a new one along with a new token."""
        try:
            response = await fetch_token(
                self.transport,
                f"{self.portal}/oauth2/token",
                {
                    "client_id": self.client_id,
                    "refresh_token": self.refresh_token,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "exchange_refresh_token",
                },
            )
        except ArcGISRequestError as e:
            raise ArcGISTokenRequestError(
                e.message,
                TokenRequestErrorCode.REFRESH_TOKEN_EXCHANGE_FAILED,
                e.response,
                e.url,
                e.options,
            ) from e

        self._token = response.token
        self._token_expires = response.expires
        self._refresh_token = response.refresh_token
        self._refresh_token_expires = response.refresh_token_expires
        logger.info("Exchanged refresh token")
        return self

    def update_token(
        self, new_token: str, new_token_expiration: datetime | None
    ) -> ArcGISIdentityManager:
        """Replace the current token, e.g. with one from an external source."""
        self._token = new_token
        self._token_expires = ensure_utc(new_token_expiration)
        return self

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    async def fetch_authorized_domains(self) -> ArcGISIdentityManager:
        """Cache the portal's authorized cross-origin domains as https origins.

        Skipped for single-server managers and managers without a portal.
        """
        if self.server or not self.portal:
            return self

        portal_info = await self.get_portal()
        domains = portal_info.get("authorizedCrossOriginDomains") or []
        if domains:
            self.trusted_domains = [
                domain if domain.startswith("https://") else f"https://{domain}"
                for domain in domains
                if not domain.startswith("http://")
            ]
        return self

    def get_domain_credentials(self, url: str) -> CredentialsPolicy:
        """Return ``"include"`` for trusted domains, else ``"same-origin"``."""
        if any(url.startswith(domain) for domain in self.trusted_domains):
            return "include"
        return "same-origin"

    def get_server_root_url(self, url: str) -> str:
        return get_server_root_url(url)

    # ------------------------------------------------------------------
    # Sign out
    # ------------------------------------------------------------------

    @staticmethod
    async def destroy(manager: ArcGISIdentityManager) -> dict[str, Any]:
        """Revoke the refresh token, or the access token if there is none."""
        return await revoke_token(
            manager.transport,
            manager.refresh_token or manager.token,
            client_id=manager.client_id,
            portal=manager.portal,
        )

    async def sign_out(self) -> dict[str, Any]:
        return await ArcGISIdentityManager.destroy(self)

    async def close(self) -> None:
        """Close the transport if this manager created it."""
        if self._owns_transport:
            await self.transport.close()
