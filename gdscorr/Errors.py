#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves


class GDSCorrError(Exception):
    pass


class SchemaError(GDSCorrError):
    """
    Raw table (or consolidated data-set) is missing an expected column, marker or structure.

    """


class UnresolvedMappingError(GDSCorrError):
    """
    Gene symbol to Entrez ID mapping is still ambiguous after applying the exclusion lists.

    """


class QueryError(GDSCorrError):
    pass


class GeneNotFoundError(QueryError):
    pass


class DrugNotFoundError(QueryError):
    pass


class InsufficientDataError(QueryError):
    pass
