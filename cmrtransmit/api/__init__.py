# These are all of the service functions that are used to talk to the CMR applications.
# Functions whose names are shared by several applications, such as reset and
# delete_concept, are reached through their module.
from . import (
    access_control_services,
    cubby_services,
    echo_acl_services,
    echo_provider_services,
    echo_rest_services,
    index_set_services,
    ingest_services,
    kms_services,
    metadata_db_services,
)
from .access_control_services import (
    add_members,
    create_acl,
    create_group,
    delete_acl,
    delete_group,
    get_access_control_health,
    get_acl,
    get_group,
    get_members,
    get_permissions,
    remove_members,
    search_for_acls,
    search_for_groups,
    update_acl,
    update_group,
)
from .cubby_services import (
    delete_all_values,
    delete_value,
    get_cubby_health,
    get_keys,
    get_value,
    set_value,
)
from .echo_acl_services import (
    acl_type_to_object_identity_type_string,
    convert_provider_guid_to_id_in_acl,
    get_acls_by_types,
    validate_type,
)
from .echo_provider_services import get_provider_guid_id_map
from .index_set_services import get_index_set, get_index_set_health
from .ingest_services import get_ingest_health, ingest_concept
from .kms_services import (
    get_keywords_for_keyword_scheme,
    translate_keyword_scheme_to_cmr,
    translate_keyword_scheme_to_gcmd,
)
from .metadata_db_services import (
    create_provider,
    create_provider_raw,
    delete_provider,
    delete_provider_raw,
    find_collections,
    get_concept,
    get_concept_id,
    get_concept_revisions,
    get_expired_collection_concept_ids,
    get_latest_concept,
    get_latest_concepts,
    get_metadata_db_health,
    get_providers,
    get_providers_raw,
    save_concept,
    update_provider_raw,
)

__all__ = [
    # modules
    "access_control_services",
    "cubby_services",
    "echo_acl_services",
    "echo_provider_services",
    "echo_rest_services",
    "index_set_services",
    "ingest_services",
    "kms_services",
    "metadata_db_services",
    # access_control_services
    "add_members",
    "create_acl",
    "create_group",
    "delete_acl",
    "delete_group",
    "get_access_control_health",
    "get_acl",
    "get_group",
    "get_members",
    "get_permissions",
    "remove_members",
    "search_for_acls",
    "search_for_groups",
    "update_acl",
    "update_group",
    # cubby_services
    "delete_all_values",
    "delete_value",
    "get_cubby_health",
    "get_keys",
    "get_value",
    "set_value",
    # echo_acl_services
    "acl_type_to_object_identity_type_string",
    "convert_provider_guid_to_id_in_acl",
    "get_acls_by_types",
    "validate_type",
    # echo_provider_services
    "get_provider_guid_id_map",
    # index_set_services
    "get_index_set",
    "get_index_set_health",
    # ingest_services
    "get_ingest_health",
    "ingest_concept",
    # kms_services
    "get_keywords_for_keyword_scheme",
    "translate_keyword_scheme_to_cmr",
    "translate_keyword_scheme_to_gcmd",
    # metadata_db_services
    "create_provider",
    "create_provider_raw",
    "delete_provider",
    "delete_provider_raw",
    "find_collections",
    "get_concept",
    "get_concept_id",
    "get_concept_revisions",
    "get_expired_collection_concept_ids",
    "get_latest_concept",
    "get_latest_concepts",
    "get_metadata_db_health",
    "get_providers",
    "get_providers_raw",
    "save_concept",
    "update_provider_raw",
]
