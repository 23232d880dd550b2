# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    VaultError,
    get_database_url,
    get_maps_api_key,
    get_admin_secret,
    get_email_config,
)
from clients.postgres_client import PostgresClient, PostgresTransaction
from clients.email_client import EmailGatewayClient, EmailGatewayError
from clients.distance_client import DistanceMatrixClient, DistanceLookupError, DistanceResult
