#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves

import logging
import numpy as np
import pandas as pd
from gdscorr.GDSCorrUtils import data_file
from gdscorr.Errors import SchemaError, UnresolvedMappingError


def assert_columns(df, columns, table):
    missing = [c for c in columns if c not in df.columns]

    if len(missing) > 0:
        raise SchemaError(f"{table} table is missing columns: {'; '.join(missing)}")


def cosmic_ids(values, table):
    ids = pd.to_numeric(values, errors="coerce")

    if ids.isnull().any():
        raise SchemaError(f"{table} table has {ids.isnull().sum()} rows with missing or invalid COSMIC ids")

    return ids.astype(int)


class CellLines:
    """
    Import module that handles the sample list (i.e. list of cell lines) and their descriptive information.

    """

    COLUMNS = {
        "Sample Name": "sample_name",
        "COSMIC identifier": "cosmic_id",
        "GDSC Tissue descriptor 1": "tissue",
        "GDSC Tissue descriptor 2": "histology",
        "Cancer Type (matching TCGA label)": "cancer_type_tcga_label",
    }

    TOTAL_ROW = "TOTAL:"

    TCGA_LABEL_MAP = {"COAD/READ": "COAD&READ"}

    def __init__(self, cellline_file="raw/Cell_Lines_Details.csv"):
        self.cellline_file = cellline_file

        self.celllines = pd.read_csv(data_file(self.cellline_file))

    def get_data(self):
        return self.celllines.copy()

    def clean(self):
        df = self.get_data()
        assert_columns(df, self.COLUMNS, "Cell lines")

        df = df.rename(columns=self.COLUMNS)

        # Drop synthetic total row
        df = df[df["sample_name"] != self.TOTAL_ROW]

        # Harmonise cancer type label spelling
        df = df.replace({"cancer_type_tcga_label": self.TCGA_LABEL_MAP})

        df = df.assign(cosmic_id=cosmic_ids(df["cosmic_id"], "Cell lines")).set_index("cosmic_id")

        if not df.index.is_unique:
            duplicated = df.index[df.index.duplicated()].unique()
            raise SchemaError(
                f"Cell lines table has duplicated COSMIC ids: {'; '.join(map(str, duplicated))}"
            )

        logging.getLogger("GDSCorr").info(f"Cell lines={df.shape[0]}")

        return df


class DrugResponse:
    """
    Importer module for drug-response measurements acquired at Sanger Institute GDSC (https://cancerrxgene.org).

    """

    SAMPLE_COLUMNS = ["COSMIC_ID"]
    DRUG_COLUMNS = ["DRUG_NAME"]
    NUMERIC_COLUMNS = ["MIN_CONC", "MAX_CONC", "LN_IC50", "AUC", "RMSE", "Z_SCORE"]

    def __init__(self, drugresponse_file="raw/GDSC_fitted_dose_response.csv"):
        self.drugresponse_file = drugresponse_file

        self.drugresponse = pd.read_csv(data_file(self.drugresponse_file))

    def get_data(self):
        return self.drugresponse.copy()

    @staticmethod
    def ln_to_log2(values):
        # log2(exp(x))
        return values / np.log(2)

    def clean(self):
        df = self.get_data()
        assert_columns(
            df, self.SAMPLE_COLUMNS + self.DRUG_COLUMNS + self.NUMERIC_COLUMNS, "Drug response"
        )

        # Best-effort numeric coercion, unparsable values become NaN
        for c in self.NUMERIC_COLUMNS:
            df[c] = pd.to_numeric(df[c], errors="coerce")

        df.columns = [c.lower() for c in df.columns]

        # IC50 from natural log to log2
        df["ln_ic50"] = self.ln_to_log2(df["ln_ic50"])
        df = df.rename(columns=dict(ln_ic50="ic50"))

        df["cosmic_id"] = cosmic_ids(df["cosmic_id"], "Drug response")

        logging.getLogger("GDSCorr").info(
            f"Drug response measurements={df.shape[0]}; Drugs={df['drug_name'].nunique()}; "
            f"Missing IC50={df['ic50'].isnull().sum()}"
        )

        return df


class GeneExpression:
    """
    Import module of gene-expression (RMA) data-set, genes in rows and cell lines in columns.

    """

    GENE_COLUMN = "GENE_SYMBOLS"
    ANNOTATION_COLUMNS = ["GENE_title"]
    SAMPLE_MARKER = "DATA."

    def __init__(self, gexp_file="raw/Cell_line_RMA_proc_basalExp.txt", sep="\t"):
        self.gexp_file = gexp_file

        self.gexp = pd.read_csv(data_file(self.gexp_file), sep=sep)

    def get_data(self):
        return self.gexp.copy()

    @classmethod
    def parse_sample(cls, column):
        if cls.SAMPLE_MARKER not in column:
            raise SchemaError(
                f"Expression column '{column}' does not contain the '{cls.SAMPLE_MARKER}' marker"
            )

        return column.split(cls.SAMPLE_MARKER)[-1]

    def symbols(self):
        return set(self.get_data()[self.GENE_COLUMN].dropna())

    def clean(self, gene_map, cosmic_ids):
        """
        Clean the expression matrix and replace gene symbols by Entrez IDs.

        :param gene_map: reconciled 1:1 mapping table (columns symbol and entrez_id), see
            GeneMapping.reconcile_gene_map
        :param cosmic_ids: COSMIC ids of the cell lines table; other samples are discarded
        :return: pandas.DataFrame (Entrez ID x COSMIC ID)
        """
        df = self.get_data()
        assert_columns(df, [self.GENE_COLUMN], "Gene expression")

        # Drop genes without symbol
        df = df[df[self.GENE_COLUMN].notnull()]
        df = df[df[self.GENE_COLUMN].astype(str).str.strip() != ""]

        df = df.drop(columns=[c for c in self.ANNOTATION_COLUMNS if c in df.columns])
        df = df.set_index(self.GENE_COLUMN)

        # Cell line COSMIC ids from column headers
        samples = pd.to_numeric(
            pd.Series([self.parse_sample(c) for c in df.columns]), errors="coerce"
        )
        df.columns = samples.values

        # Map gene symbols to Entrez IDs
        df = df[df.index.isin(gene_map["symbol"])]

        if not df.index.is_unique:
            duplicated = df.index[df.index.duplicated()].unique()
            raise UnresolvedMappingError(
                f"Gene symbols repeated in the expression matrix: {'; '.join(duplicated)}"
            )

        gene_map = gene_map[gene_map["symbol"].isin(df.index)].sort_values("symbol")
        df = df.sort_index()

        assert list(df.index) == list(gene_map["symbol"]), "Gene symbols not aligned"

        df.index = pd.Index(gene_map["entrez_id"].values, name="entrez_id")

        # Keep cell lines in the samplesheet
        df = df.loc[:, df.columns.isin(cosmic_ids)]
        df.columns = pd.Index(df.columns.astype(int), name="cosmic_id")

        logging.getLogger("GDSCorr").info(f"Gene expression: Genes={df.shape[0]}; Cell lines={df.shape[1]}")

        return df
