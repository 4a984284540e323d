from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(session: AsyncSession, model):
    """Core INSERT on the model's table that supports ON CONFLICT for the session's backend."""
    table = getattr(model, '__table__', model)
    name = session.get_bind().dialect.name
    if name == 'postgresql':
        return postgresql.insert(table)
    if name == 'sqlite':
        return sqlite.insert(table)
    raise RuntimeError(f'Unsupported database dialect: {name}')
