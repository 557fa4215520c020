from .role_sync import on_user_role_changed, watch_user_role_changes
