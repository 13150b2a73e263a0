"""Multi-app: a shop, an admin console, and a health endpoint on one server.

The shop is mounted on the default listener at the path its class
declares. The admin console insists on the ``admin`` listener and
would refuse to start without it. Health checks prefer a ``metrics``
listener but fall back to the default one.

Run:
    python app.py
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from roost import (
    Application,
    ApplicationRegistration,
    ListenerConfig,
    ResourceConfig,
    Server,
    ServerConfig,
    application_path,
    routing_name,
)

# -- Resources --


class ProductResource:
    def list(self) -> list[str]:
        return ["kettle", "teapot"]


class CartResource:
    pass


class UserAdminResource:
    pass


class HealthResource:
    def check(self) -> dict[str, str]:
        return {"status": "UP"}


# -- Applications --


@application_path("/shop")
class ShopApp(Application):
    def classes(self):
        return {ProductResource, CartResource}

    def properties(self):
        return {"shop.currency": "EUR"}


@application_path("/console")
@routing_name("admin", required=True)
class AdminApp(Application):
    def classes(self):
        return {UserAdminResource}


@routing_name("metrics")
class HealthApp(Application):
    def singletons(self):
        return [HealthResource()]


# -- Server --

config = ServerConfig(
    host="127.0.0.1",
    port=8080,
    listeners=(ListenerConfig("admin", port=8081),),
)

# Caller owns the executor; the server only hands it out
pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="shop")

shop = (
    ApplicationRegistration.builder()
    .application_class(ShopApp)
    .executor(pool)
    .build()
)

api = ResourceConfig(ProductResource, name="public-api")

server = (
    Server.builder(config)
    .add_application(shop)
    .add_application(AdminApp)
    .add_application(HealthApp(), context_root="/health")
    .add_application(api, context_root="/api/v1")
    .build()
)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    for mount in server.mounts:
        print(f"{mount.listener:>10}  {mount.context_root:<10}  {mount.app_class_name}")
    pool.shutdown()
