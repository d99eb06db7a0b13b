"""Database CRUD operations."""
from trainingcog.crud.crud import (
    SEDI_CACHE_KEY,
    RUOLI_CACHE_KEY,
    UTENTI_CACHE_KEY,
    STAFF_CACHE_KEY,
    EDUCATORI_CACHE_KEY,
    PROFILE_CACHE_KEYS,
    get_user_id_for_token,
    revoke_token,
    create_session,
    get_profile,
    get_profile_role,
    list_profiles,
    list_profiles_by_roles,
    create_profile,
    delete_profile,
    list_roles,
    create_role,
    list_sedi,
    get_sede,
    create_sede,
    update_sede,
    delete_sede,
    create_access_log,
    list_access_logs
)

__all__ = [
    "SEDI_CACHE_KEY",
    "RUOLI_CACHE_KEY",
    "UTENTI_CACHE_KEY",
    "STAFF_CACHE_KEY",
    "EDUCATORI_CACHE_KEY",
    "PROFILE_CACHE_KEYS",
    "get_user_id_for_token",
    "revoke_token",
    "create_session",
    "get_profile",
    "get_profile_role",
    "list_profiles",
    "list_profiles_by_roles",
    "create_profile",
    "delete_profile",
    "list_roles",
    "create_role",
    "list_sedi",
    "get_sede",
    "create_sede",
    "update_sede",
    "delete_sede",
    "create_access_log",
    "list_access_logs"
]
