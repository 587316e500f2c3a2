"""Algebraic data types."""
import logging

from dataclasses import FrozenInstanceError
from types import GenericAlias, new_class
from typing import Any


logger = logging.getLogger(__name__)

ADT = None


def _is_descriptor(obj) -> bool:
    return (
        hasattr(obj, "__get__") or hasattr(obj, "__set__") or hasattr(obj, "__delete__")
    )


def _is_dunder(name: str) -> bool:
    return (
        len(name) > 4
        and name[:2] == name[-2:] == "__"
        and name[2] != "_"
        and name[-3] != "_"
    )


def _is_sunder(name: str) -> bool:
    return (
        len(name) > 2
        and name[0] == name[-1] == "_"
        and name[1:2] != "_"
        and name[-2:-1] != "_"
    )


def _is_private(cls_name: str, name: str) -> bool:
    pattern = "_%s__" % (cls_name,)
    return len(name) > len(pattern) and name.startswith(pattern)


def _frozen_setattr(self, name, value):
    raise FrozenInstanceError(f"cannot assign to field {name!r}")


def _frozen_delattr(self, name):
    raise FrozenInstanceError(f"cannot delete field {name!r}")


class _ADTDict(dict):
    """
    Track member order and ensure member names are not reused.

    ADTMeta will use the names found in self._member_names as the
    ADT member names.
    """

    def __init__(self, cls_name: str):
        super().__init__()
        self._cls_name = cls_name
        self._member_names: list[str] = []

    def __setitem__(self, key: str, value: Any) -> None:
        if _is_private(self._cls_name, key) or _is_dunder(key):
            # name will be a normal attribute
            pass
        elif _is_sunder(key):
            raise ValueError(
                "_sunder_ names, such as %r, are reserved for ADT use" % (key,)
            )
        elif key in self._member_names:
            # descriptor overwriting a member?
            raise TypeError("%r already defined as %r" % (key, self[key]))
        elif _is_descriptor(value) and not isinstance(value, type):
            pass
        else:
            if key in self:
                # member overwriting a descriptor?
                raise TypeError("%r already defined as %r" % (key, self[key]))
            self._member_names.append(key)
        super().__setitem__(key, value)


class ADTMeta(type):
    """
    Metaclass for ADT
    """

    def __instancecheck__(cls, instance: Any) -> bool:
        return type(instance) in cls._cls_set_ or super().__instancecheck__(instance)

    @classmethod
    def __prepare__(metacls, cls, bases, **kwds):
        # check that previous members do not exist
        metacls._check_for_existing_members(cls, bases)
        if len(bases) > 1:
            raise TypeError("ADTs do not support mixins")
        return _ADTDict(cls)

    def __new__(metacls, cls, bases, classdict, **kwds):
        # an ADT class is final once its members have been defined.
        custom_methods = metacls._gather_user_methods(classdict) if bases else {}

        # save members into a separate mapping so they don't get baked into
        # the new class
        members = {k: classdict[k] for k in classdict._member_names}
        for name in classdict._member_names:
            dict.__delitem__(classdict, name)

        if "mro" in members:
            raise ValueError("Invalid ADT member name: mro")

        # create a default docstring if one has not been provided
        if "__doc__" not in classdict:
            classdict["__doc__"] = "An ADT."

        adt_class = super().__new__(metacls, cls, bases, dict(classdict), **kwds)
        adt_class._member_names_ = []  # names in definition order
        adt_class._member_map_ = {}  # name->member map
        adt_class._cls_set_ = set()

        for member_name, value in members.items():
            if isinstance(value, type):
                # We subclass the class to bring the ADT's methods into it.
                ns = dict(custom_methods)
                params = getattr(value, "__dataclass_params__", None)
                if params is not None and params.frozen:
                    # the dataclass guard only covers its fields on instances
                    # of exactly that class
                    ns["__setattr__"] = _frozen_setattr
                    ns["__delattr__"] = _frozen_delattr
                member = new_class(
                    value.__name__, (value,), exec_body=lambda d: d.update(ns)
                )
                member.__qualname__ = value.__qualname__
                member.__module__ = value.__module__
                adt_class._cls_set_.add(member)
            else:
                member = object.__new__(adt_class)
                member._name_ = member_name
            adt_class._member_names_.append(member_name)
            setattr(adt_class, member_name, member)
            adt_class._member_map_[member_name] = member

        if bases:
            logger.debug(
                "Defined ADT %s with members %s",
                adt_class.__qualname__,
                ", ".join(adt_class._member_names_),
            )
        return adt_class

    def __bool__(cls):
        """
        classes/types should always be True.
        """
        return True

    def __call__(cls, value):
        """
        Return `value` if it is a value of this ADT.

        New constants cannot be created at runtime; build record values
        through the variant classes.
        """
        if isinstance(value, cls):
            return value
        raise ValueError("%r is not a valid %s" % (value, cls.__qualname__))

    def __contains__(cls, obj) -> bool:
        return any(obj is member for member in cls._member_map_.values())

    def __delattr__(cls, attr):
        if attr in cls._member_map_:
            raise AttributeError("%s: cannot delete ADT member." % cls.__name__)
        super().__delattr__(attr)

    def __iter__(cls):
        """
        Returns members in definition order.
        """
        return (cls._member_map_[name] for name in cls._member_names_)

    def __len__(cls):
        return len(cls._member_names_)

    def __repr__(cls):
        return "<ADT %r>" % cls.__name__

    def __setattr__(cls, name, value):
        """
        Block attempts to reassign ADT members.
        """
        member_map = cls.__dict__.get("_member_map_", {})
        if name in member_map:
            raise AttributeError("Cannot reassign members.")
        super().__setattr__(name, value)

    @staticmethod
    def _check_for_existing_members(class_name, bases):
        for chain in bases:
            for base in chain.__mro__:
                if (
                    ADT is not None
                    and issubclass(base, ADT)
                    and base.__dict__.get("_member_names_")
                ):
                    raise TypeError(
                        "%s: cannot extend ADT %r" % (class_name, base.__name__)
                    )

    @staticmethod
    def _gather_user_methods(classdict: dict[str, Any]) -> dict:
        res = {}
        for k, v in classdict.items():
            if _is_descriptor(v) and not isinstance(v, type):
                res[k] = v

        return res


class ADT(metaclass=ADTMeta):
    """
    An algebraic data type.

    Derive from this class to define new algebraic data types.
    """

    def __repr__(self):
        return "<%s.%s>" % (self.__class__.__name__, self._name_)

    def __str__(self):
        return "%s.%s" % (self.__class__.__name__, self._name_)

    def __hash__(self):
        return hash(self._name_)

    def __reduce_ex__(self, proto):
        # constants are singletons, unpickle them by name
        return getattr, (self.__class__, self._name_)

    def __class_getitem__(cls, types):
        return GenericAlias(cls, types)
