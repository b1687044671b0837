# Role: Shared singletons for the API layer. Routers import from here so tests can patch one place.

from backend.core.relay import RelayProxy

relay_proxy = RelayProxy()
