"""Infrastructure layer — configfs actions, the action runner, the overlay root facade."""
