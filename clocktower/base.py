# base.py: implements the ClocktowerBase SQLAlchemy db Mixin
#
# pylint: disable=no-member,protected-access
#
"""
ClocktowerBase customizable attributes, override these in the model class:

fillable:
Type: Optional[Sequence[str]]
Description: Names of the columns that may be mass-assigned with `fill`, None means all columns.

guarded:
Type: Optional[Sequence[str]]
Description: Names of the columns that may never be mass-assigned, None means the primary keys.

db_commit:
Type: bool
Description: Commit the session when an instance is saved or destroyed,
by default the session is only flushed and committed at the end of the request.
"""
from __future__ import annotations
from http import HTTPStatus
import sqlalchemy
from sqlalchemy import inspect as sqla_inspect
import clocktower
from .attr_parse import parse_attr
from .errors import NotFoundError, ValidationError, GenericError


class ClocktowerBase:
    """This SQLAlchemy mixin provides the persistence operations used by the controllers:
    lookups by id, mass assignment, saving, reloading and deleting.

    Use it together with the flask_sqlalchemy model class, e.g.

        class Book(ClocktowerBase, db.Model):
            __tablename__ = "books"
            id = db.Column(db.Integer, primary_key=True)
            title = db.Column(db.String)

    Only single column primary keys are supported.
    """

    fillable = None
    guarded = None
    db_commit = False

    @classmethod
    def _s_session(cls):
        """
        :return: the scoped session of the registered flask_sqlalchemy extension
        """
        return clocktower.DB.session

    @classmethod
    def _s_columns(cls) -> list:
        """
        :return: list of (mapped) column attributes
        """
        return list(sqla_inspect(cls).column_attrs)

    @classmethod
    def _s_pk(cls):
        """
        :return: the primary key column
        """
        primary_keys = sqla_inspect(cls).primary_key
        if len(primary_keys) != 1:  # pragma: no cover
            raise GenericError(f"{cls.__name__} should have exactly one primary key column")
        return primary_keys[0]

    @classmethod
    def _s_fillable(cls) -> list:
        """
        :return: names of the attributes that may be set with `fill`
        """
        pk_names = [col.key for col in sqla_inspect(cls).primary_key]
        guarded = pk_names if cls.guarded is None else list(cls.guarded)
        names = [col_attr.key for col_attr in cls._s_columns()]
        if cls.fillable is not None:
            names = [name for name in names if name in cls.fillable]
        return [name for name in names if name not in guarded]

    @classmethod
    def _s_query(cls):
        """
        :return: sqla query for all instances, ordered by primary key
        """
        return cls._s_session().query(cls).order_by(cls._s_pk())

    @classmethod
    def all(cls) -> list:
        """
        :return: all instances of the model
        """
        return cls._s_query().all()

    @classmethod
    def find(cls, id):
        """
        :param id: primary key value, url ids are strings so they're parsed to the pk type
        :return: instance or None
        """
        if id is None:
            return None
        try:
            pk_value = parse_attr(cls._s_pk(), id)
        except ValidationError:
            # an id that can't be converted to the primary key type can't exist
            return None
        return cls._s_session().get(cls, pk_value)

    @classmethod
    def find_or_fail(cls, id):
        """
        :param id: primary key value
        :return: instance, an error is raised if it doesn't exist
        """
        instance = cls.find(id)
        if instance is None:
            raise NotFoundError(f'Invalid "{cls.__name__}" ID "{id}"')
        return instance

    @classmethod
    def destroy(cls, *ids) -> int:
        """
        Delete the instances with the given primary key values

        :return: the number of deleted instances
        """
        count = 0
        for id in ids:
            instance = cls.find(id)
            if instance is None:
                continue
            instance.delete()
            count += 1
        return count

    def get_key(self):
        """
        :return: the primary key value of the instance
        """
        mapper = sqla_inspect(self.__class__)
        return getattr(self, mapper.get_property_by_column(self._s_pk()).key)

    def fill(self, attributes=None, **kwargs) -> ClocktowerBase:
        """
        Mass-assign the fillable attributes, other keys are ignored

        :param attributes: dictionary (eg. request input)
        :return: self
        """
        attributes = dict(attributes or {}, **kwargs)
        mapper = sqla_inspect(self.__class__)
        for attr_name in self._s_fillable():
            if attr_name not in attributes:
                continue
            column = mapper.columns[attr_name]
            setattr(self, attr_name, parse_attr(column, attributes[attr_name]))
        return self

    def save(self) -> ClocktowerBase:
        """
        Add the instance to the session and flush it so database defaults (eg. the id) are set
        """
        session = self._s_session()
        session.add(self)
        self._s_flush()
        return self

    def delete(self) -> None:
        """
        Delete the instance from the database
        """
        self._s_session().delete(self)
        self._s_flush()

    def fresh(self) -> ClocktowerBase:
        """
        :return: the instance, reloaded from the database
        """
        return self._s_session().get(self.__class__, self.get_key(), populate_existing=True)

    def _s_flush(self) -> None:
        session = self._s_session()
        try:
            if self.db_commit:
                session.commit()
            else:
                session.flush()
        except sqlalchemy.exc.IntegrityError as exc:
            # a db constraint has been violated (e.g. duplicate key)
            clocktower.log.warning(str(exc))
            session.rollback()
            raise GenericError(str(exc.orig), status_code=HTTPStatus.CONFLICT.value)
        except sqlalchemy.exc.SQLAlchemyError as exc:
            clocktower.log.warning(str(exc))
            session.rollback()
            raise GenericError(str(exc))

    def to_dict(self) -> dict:
        """
        Create a dictionary with all the column values,
        used when no transformer has been configured

        :return: dictionary
        """
        return {col_attr.key: getattr(self, col_attr.key) for col_attr in self._s_columns()}
