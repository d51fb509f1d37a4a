"""ListKeeper user service: authentication, user CRUD, audit trail and soft delete."""
