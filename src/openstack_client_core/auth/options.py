"""Authentication options and the Keystone v3 token request body.

Example:
    ```python
    from openstack_client_core.auth import AuthOptions

    # From OS_* environment variables (and .env)
    options = AuthOptions.from_env()

    # Explicit
    options = AuthOptions(
        identity_endpoint="https://keystone.example.com:5000/v3",
        username="demo",
        password="secret",
        domain_name="Default",
        project_name="demo",
    )
    ```
"""

from dataclasses import dataclass, field

from openstack_client_core.auth.credentials import CredentialResolver
from openstack_client_core.request import UNSET, Unset, build_body


@dataclass
class _Domain:
    id: str | Unset = UNSET
    name: str | Unset = UNSET


@dataclass
class _User:
    password: str
    id: str | Unset = UNSET
    name: str | Unset = UNSET
    domain: _Domain | Unset = UNSET


@dataclass
class _ApplicationCredential:
    secret: str
    id: str | Unset = UNSET
    name: str | Unset = UNSET
    user: dict | Unset = UNSET


@dataclass
class _Identity:
    methods: list[str]
    password: dict | Unset = UNSET
    token: dict | Unset = UNSET
    application_credential: _ApplicationCredential | Unset = UNSET


@dataclass
class _ProjectScope:
    id: str | Unset = UNSET
    name: str | Unset = UNSET
    domain: _Domain | Unset = UNSET


@dataclass
class _Scope:
    project: _ProjectScope | Unset = UNSET
    domain: _Domain | Unset = UNSET
    system: dict | Unset = UNSET


@dataclass
class _Auth:
    identity: _Identity
    scope: _Scope | Unset = UNSET


def _opt(value: str | None) -> str | Unset:
    return value if value else UNSET


def _domain(domain_id: str | None, domain_name: str | None) -> _Domain | Unset:
    if not domain_id and not domain_name:
        return UNSET
    return _Domain(id=_opt(domain_id), name=_opt(domain_name))


@dataclass
class AuthOptions:
    """Credentials and scope used to obtain (and refresh) a token."""

    identity_endpoint: str
    username: str | None = None
    user_id: str | None = None
    password: str | None = field(default=None, repr=False)
    token_id: str | None = field(default=None, repr=False)
    application_credential_id: str | None = None
    application_credential_name: str | None = None
    application_credential_secret: str | None = field(default=None, repr=False)
    domain_id: str | None = None
    domain_name: str | None = None
    project_id: str | None = None
    project_name: str | None = None
    project_domain_id: str | None = None
    project_domain_name: str | None = None
    system_scope: bool = False
    allow_reauth: bool = True

    @property
    def method(self) -> str:
        """Identity method these options authenticate with.

        Raises:
            ValueError: If no method can be derived from the options.
        """
        if self.application_credential_secret and (self.application_credential_id or self.application_credential_name):
            return "application_credential"
        if self.password and (self.user_id or self.username):
            return "password"
        if self.token_id:
            return "token"
        raise ValueError(
            "AuthOptions need a password with username or user_id, a token_id, "
            "or an application credential id/name with secret"
        )

    def to_token_request(self) -> dict:
        """Build the body of ``POST /v3/auth/tokens``."""
        method = self.method
        identity = _Identity(methods=[method])

        if method == "password":
            user = _User(
                password=self.password or "",
                id=_opt(self.user_id),
                name=UNSET if self.user_id else _opt(self.username),
                domain=UNSET if self.user_id else _domain(self.domain_id, self.domain_name),
            )
            identity.password = {"user": user}
        elif method == "token":
            identity.token = {"id": self.token_id}
        else:
            credential = _ApplicationCredential(
                secret=self.application_credential_secret or "",
                id=_opt(self.application_credential_id),
            )
            if not self.application_credential_id:
                # Lookup by name needs the owning user
                credential.name = _opt(self.application_credential_name)
                user = {"id": self.user_id} if self.user_id else {"name": self.username}
                domain = _domain(self.domain_id, self.domain_name)
                if not self.user_id and domain is not UNSET:
                    user["domain"] = domain
                credential.user = user
            identity.application_credential = credential

        auth = _Auth(identity=identity, scope=self._scope(method))
        return {"auth": build_body(auth)}

    def _scope(self, method: str) -> _Scope | Unset:
        if method == "application_credential":
            # Application credentials are bound to a scope already
            return UNSET
        if self.system_scope:
            return _Scope(system={"all": True})
        if self.project_id:
            return _Scope(project=_ProjectScope(id=self.project_id))
        if self.project_name:
            domain = _domain(self.project_domain_id, self.project_domain_name)
            if domain is UNSET:
                domain = _domain(self.domain_id, self.domain_name)
            return _Scope(project=_ProjectScope(name=self.project_name, domain=domain))
        if self.domain_id or self.domain_name:
            return _Scope(domain=_domain(self.domain_id, self.domain_name))
        return UNSET

    @classmethod
    def from_env(cls, resolver: CredentialResolver | None = None) -> "AuthOptions":
        """Load options from ``OS_*`` environment variables.

        Raises:
            CredentialNotFoundError: If ``OS_AUTH_URL`` is not set.
        """
        resolver = resolver or CredentialResolver()
        identity_endpoint = resolver.resolve("OS_AUTH_URL", required=True)
        system_scope = resolver.resolve("OS_SYSTEM_SCOPE")
        return cls(
            identity_endpoint=identity_endpoint,
            username=resolver.resolve("OS_USERNAME"),
            user_id=resolver.resolve("OS_USERID"),
            password=resolver.resolve("OS_PASSWORD", secret=True),
            token_id=resolver.resolve("OS_TOKEN", secret=True),
            application_credential_id=resolver.resolve("OS_APPLICATION_CREDENTIAL_ID"),
            application_credential_name=resolver.resolve("OS_APPLICATION_CREDENTIAL_NAME"),
            application_credential_secret=resolver.resolve("OS_APPLICATION_CREDENTIAL_SECRET", secret=True),
            domain_id=resolver.resolve("OS_DOMAIN_ID", "OS_USER_DOMAIN_ID"),
            domain_name=resolver.resolve("OS_DOMAIN_NAME", "OS_USER_DOMAIN_NAME"),
            project_id=resolver.resolve("OS_PROJECT_ID", "OS_TENANT_ID"),
            project_name=resolver.resolve("OS_PROJECT_NAME", "OS_TENANT_NAME"),
            project_domain_id=resolver.resolve("OS_PROJECT_DOMAIN_ID"),
            project_domain_name=resolver.resolve("OS_PROJECT_DOMAIN_NAME"),
            system_scope=(system_scope or "").lower() == "all",
        )
