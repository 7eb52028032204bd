"""Admin notification center: notifications and message templates."""
