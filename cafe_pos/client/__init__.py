from cafe_pos.client.customers import (
    Customer,
    CustomerStore,
    RemoteCustomerStore,
    provide_customers,
    use_customers,
)
from cafe_pos.client.http import ApiClient, FetchOutcome
from cafe_pos.client.tables import (
    UNASSIGNED_FLOOR_ID,
    Floor,
    Table,
    TableList,
    TableLookup,
    TablesClient,
    map_backend_table,
)

__all__ = [
    "ApiClient",
    "FetchOutcome",
    "Customer",
    "CustomerStore",
    "RemoteCustomerStore",
    "provide_customers",
    "use_customers",
    "UNASSIGNED_FLOOR_ID",
    "Floor",
    "Table",
    "TableList",
    "TableLookup",
    "TablesClient",
    "map_backend_table",
]
