import logging
from logging.config import fileConfig

from flask import current_app

from alembic import context

USE_TWOPHASE = False

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
# This line sets up loggers basically.
fileConfig(config.config_file_name)
logger = logging.getLogger('alembic.env')


def get_engine(bind_key=None):
    return current_app.extensions['migrate'].db.engines[bind_key]


def get_engine_url(bind_key=None):
    return get_engine(bind_key).url.render_as_string(hide_password=False).replace('%', '%%')


# add your model's MetaData object here
# for 'autogenerate' support
config.set_main_option('sqlalchemy.url', get_engine_url())
bind_names = list(current_app.config.get('SQLALCHEMY_BINDS', {}).keys())
for bind in bind_names:
    context.config.set_section_option(bind, 'sqlalchemy.url', get_engine_url(bind_key=bind))
target_db = current_app.extensions['migrate'].db


def get_metadata(bind):
    """Metadata of the default database ('') or of a named bind."""
    return target_db.metadatas[bind or None]


def run_migrations_offline():
    """Run migrations in 'offline' mode.

    Emits one <bind>.sql script per database instead of connecting.
    """
    engines = {'': {'url': context.config.get_main_option('sqlalchemy.url')}}
    for name in bind_names:
        engines[name] = {'url': context.config.get_section_option(name, 'sqlalchemy.url')}

    for name, rec in engines.items():
        logger.info('Migrating database %s', name or '<default>')
        file_ = f'{name or "website"}.sql'
        logger.info('Writing output to %s', file_)
        with open(file_, 'w') as buffer:
            context.configure(
                url=rec['url'],
                output_buffer=buffer,
                target_metadata=get_metadata(name),
                literal_binds=True,
            )
            with context.begin_transaction():
                context.run_migrations(engine_name=name)


def run_migrations_online():
    """Run migrations in 'online' mode, one transaction per database."""

    # this callback is used to prevent an auto-migration from being generated
    # when there are no changes to the schema
    def process_revision_directives(context, revision, directives):
        if getattr(config.cmd_opts, 'autogenerate', False):
            script = directives[0]
            if all(upgrade_ops.is_empty() for upgrade_ops in script.upgrade_ops_list):
                directives[:] = []
                logger.info('No changes in schema detected.')

    conf_args = current_app.extensions['migrate'].configure_args
    if conf_args.get('process_revision_directives') is None:
        conf_args['process_revision_directives'] = process_revision_directives

    engines = {'': {'engine': get_engine()}}
    for name in bind_names:
        engines[name] = {'engine': get_engine(bind_key=name)}

    for rec in engines.values():
        rec['connection'] = conn = rec['engine'].connect()
        rec['transaction'] = conn.begin_twophase() if USE_TWOPHASE else conn.begin()

    try:
        for name, rec in engines.items():
            logger.info('Migrating database %s', name or '<default>')
            context.configure(
                connection=rec['connection'],
                upgrade_token=f'{name}_upgrades',
                downgrade_token=f'{name}_downgrades',
                target_metadata=get_metadata(name),
                **conf_args
            )
            context.run_migrations(engine_name=name)

        if USE_TWOPHASE:
            for rec in engines.values():
                rec['transaction'].prepare()

        for rec in engines.values():
            rec['transaction'].commit()
    except Exception:
        for rec in engines.values():
            rec['transaction'].rollback()
        raise
    finally:
        for rec in engines.values():
            rec['connection'].close()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
