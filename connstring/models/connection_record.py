"""
Connection Record Model - Dialect-agnostic view of a connection string
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Any

from connstring.utils.constants import DbType, ReservedParam

_CLUSTER_KEYS = (ReservedParam.IS_CLUSTER, ReservedParam.CLUSTER_HOSTS)

# Reserved params each database type folds into its typed fields
_RESERVED_KEYS_BY_TYPE = {
    DbType.SQL_SERVER: (ReservedParam.INSTANCE,),
    DbType.AZURE_COSMOS: (ReservedParam.ORIGINAL_ENDPOINT,),
    DbType.REDIS: _CLUSTER_KEYS,
    DbType.MONGODB_COMPASS: _CLUSTER_KEYS,
}


@dataclass
class ConnectionRecord:
    """Fields extracted from a connection string, shared by parse and reconstruct"""
    db_type: DbType = DbType.UNKNOWN
    is_cloud: bool = False
    protocol: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None  # plaintext or cipher token, see encrypted
    host: Optional[str] = None
    port: Optional[str] = None
    db_name: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)
    original_string: Optional[str] = None

    # Dialect-specific extras
    instance: Optional[str] = None  # SQL Server named instance
    cluster_hosts: Optional[List[str]] = None  # Redis / Mongo host list
    is_cluster: bool = False
    original_endpoint: Optional[str] = None  # Cosmos AccountEndpoint text

    # True: password/original_string hold tokens. None: not known.
    encrypted: Optional[bool] = None

    @property
    def is_unknown(self) -> bool:
        return self.db_type == DbType.UNKNOWN

    def masked(self) -> 'ConnectionRecord':
        """Copy safe for display and logging"""
        return replace(
            self,
            password='****' if self.password else None,
            original_string=None,
            params=dict(self.params),
            cluster_hosts=list(self.cluster_hosts) if self.cluster_hosts else self.cluster_hosts,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization

        Dialect extras are folded back into params under their reserved
        keys, the layout consumers of earlier versions expect.
        """
        params: Dict[str, Any] = dict(self.params)
        if self.instance is not None:
            params[ReservedParam.INSTANCE] = self.instance
        if self.original_endpoint is not None:
            params[ReservedParam.ORIGINAL_ENDPOINT] = self.original_endpoint
        if self.cluster_hosts is not None:
            params[ReservedParam.CLUSTER_HOSTS] = list(self.cluster_hosts)
        if self.is_cluster:
            params[ReservedParam.IS_CLUSTER] = True

        return {
            'dbType': self.db_type.value,
            'isCloud': self.is_cloud,
            'protocol': self.protocol,
            'username': self.username,
            'password': self.password,
            'host': self.host,
            'port': self.port,
            'dbName': self.db_name,
            'params': params,
            'originalString': self.original_string,
            'encrypted': self.encrypted,
        }

    @staticmethod
    def from_dict(data: dict) -> 'ConnectionRecord':
        """Build a record from to_dict() output or an older params-only layout

        Reserved keys are promoted only for the database types that own
        them; for any other type they stay ordinary params.
        """
        db_type = DbType(data.get('dbType', DbType.UNKNOWN.value))
        params = dict(data.get('params') or {})
        owned = _RESERVED_KEYS_BY_TYPE.get(db_type, ())
        extras = {key: params.pop(key) for key in owned if key in params}

        instance = extras.get(ReservedParam.INSTANCE)
        original_endpoint = extras.get(ReservedParam.ORIGINAL_ENDPOINT)
        cluster_hosts = extras.get(ReservedParam.CLUSTER_HOSTS)
        is_cluster = extras.get(ReservedParam.IS_CLUSTER, False)

        if isinstance(cluster_hosts, str):
            cluster_hosts = [h.strip() for h in cluster_hosts.split(',') if h.strip()]
        if isinstance(is_cluster, str):
            is_cluster = is_cluster.lower() == 'true'

        port = data.get('port')
        return ConnectionRecord(
            db_type=db_type,
            is_cloud=bool(data.get('isCloud', False)),
            protocol=data.get('protocol') or None,
            username=data.get('username') or None,
            password=data.get('password') or None,
            host=data.get('host') or None,
            port=str(port) if port not in (None, '') else None,
            db_name=data.get('dbName') or None,
            params={k: str(v) for k, v in params.items()},
            original_string=data.get('originalString') or None,
            instance=instance,
            cluster_hosts=list(cluster_hosts) if cluster_hosts else None,
            is_cluster=bool(is_cluster),
            original_endpoint=original_endpoint,
            encrypted=data.get('encrypted'),
        )
