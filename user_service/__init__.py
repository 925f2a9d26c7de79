"""Servicio de usuarios: CRUD sobre la tabla 'users'."""
