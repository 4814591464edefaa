#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves

import os
import logging
import argparse
import pandas as pd
from scipy.stats import pearsonr, spearmanr
from gdscorr.Dataset import GDSCDataset
from gdscorr.GDSCorrPlot import GDSCorrPlot
from gdscorr.GDSCorrUtils import data_file, rpath
from gdscorr.Errors import (
    QueryError,
    GeneNotFoundError,
    DrugNotFoundError,
    InsufficientDataError,
)


class CorrelationExplorer:
    """
    Gene-expression ~ drug-response correlations across the cell lines of a consolidated GDSC data-set.

    """

    DRUG_METRICS = ["ic50", "auc"]
    CORR_METHODS = dict(pearson=pearsonr, spearman=spearmanr)

    MIN_OBSERVATIONS = 3

    CORR_DECIMALS = 3
    PVAL_DECIMALS = 10
    PVAL_UNDERFLOW = 1e-10

    def __init__(self, dataset, outdir=None):
        self.dataset = dataset
        self.outdir = rpath if outdir is None else outdir

    @classmethod
    def check_metric(cls, drug_metric):
        drug_metric = drug_metric.lower()

        if drug_metric not in cls.DRUG_METRICS:
            raise ValueError(f"drug_metric not supported, choose from: {', '.join(cls.DRUG_METRICS)}")

        return drug_metric

    @classmethod
    def check_method(cls, corr_method):
        corr_method = corr_method.lower()

        if corr_method not in cls.CORR_METHODS:
            raise ValueError(f"corr_method not supported, choose from: {', '.join(cls.CORR_METHODS)}")

        return corr_method

    def gene_expression(self, gene_id):
        gene_id = str(gene_id)

        if gene_id not in self.dataset.gexp.index:
            raise GeneNotFoundError(f"Gene {gene_id} not in gene-expression matrix")

        return self.dataset.gexp.loc[gene_id].dropna().rename(gene_id)

    def drug_response(self, drug_name, drug_metric):
        drug_metric = self.check_metric(drug_metric)

        df = self.dataset.drugresponse
        df = df[df["drug_name"] == drug_name]

        if df.shape[0] == 0:
            raise DrugNotFoundError(f"Drug {drug_name} not in drug-response measurements")

        # Drugs screened more than once are averaged per cell line
        return df.groupby("cosmic_id")[drug_metric].mean().dropna().rename(drug_metric)

    def gene_drug_table(self, gene_id, drug_name, drug_metric):
        gexp = self.gene_expression(gene_id)
        drug = self.drug_response(drug_name, drug_metric)

        df = pd.concat([gexp, drug], axis=1, join="inner", sort=False)
        df.index.name = "cosmic_id"

        return df.reset_index()

    @staticmethod
    def file_prefix(*args):
        return "_".join(str(a).replace(os.sep, "-").replace(" ", "-") for a in args)

    def correlation(self, plot_df, corr_method):
        corr_method = self.check_method(corr_method)

        if plot_df.shape[0] < self.MIN_OBSERVATIONS:
            raise InsufficientDataError(
                f"{plot_df.shape[0]} paired observations, at least {self.MIN_OBSERVATIONS} are required"
            )

        x, y = plot_df.columns[1], plot_df.columns[2]

        constant = [c for c in [x, y] if plot_df[c].nunique() < 2]
        if len(constant) > 0:
            raise InsufficientDataError(
                f"Constant values in {'; '.join(map(str, constant))}, correlation is undefined"
            )

        corr, pval = self.CORR_METHODS[corr_method](plot_df[x], plot_df[y])

        pval = 0.0 if pval < self.PVAL_UNDERFLOW else round(float(pval), self.PVAL_DECIMALS)

        return round(float(corr), self.CORR_DECIMALS), pval

    def gene_drug_correlation(self, gene_id, drug_name, drug_metric, corr_method):
        drug_metric = self.check_metric(drug_metric)
        corr_method = self.check_method(corr_method)

        plot_df = self.gene_drug_table(gene_id, drug_name, drug_metric)

        corr, pval = self.correlation(plot_df, corr_method)

        res = dict(
            gene_id=str(gene_id),
            drug_name=drug_name,
            drug_metric=drug_metric,
            method=corr_method,
            corr=corr,
            pval=pval,
            n=plot_df.shape[0],
        )

        logging.getLogger("GDSCorr").info(
            f"{gene_id} ~ {drug_name} ({drug_metric}): {corr_method}={corr}, p={pval}, N={res['n']}"
        )

        return res

    def export_gene_drug_table(self, gene_id, drug_name, drug_metric):
        drug_metric = self.check_metric(drug_metric)

        plot_df = self.gene_drug_table(gene_id, drug_name, drug_metric)

        os.makedirs(self.outdir, exist_ok=True)
        out_file = os.path.join(self.outdir, f"{self.file_prefix(gene_id, drug_name, drug_metric)}.csv")

        plot_df.to_csv(out_file, index=False)
        logging.getLogger("GDSCorr").info(f"Exported: {out_file}")

        return out_file

    def plot_gene_drug(self, gene_id, drug_name, drug_metric, corr_method):
        drug_metric = self.check_metric(drug_metric)
        corr_method = self.check_method(corr_method)

        plot_df = self.gene_drug_table(gene_id, drug_name, drug_metric)
        corr, pval = self.correlation(plot_df, corr_method)

        GDSCorrPlot.plot_gene_drug(plot_df, str(gene_id), drug_name, drug_metric, corr, pval, corr_method)

        os.makedirs(self.outdir, exist_ok=True)
        out_file = os.path.join(
            self.outdir, f"{self.file_prefix(gene_id, drug_name, drug_metric, corr_method)}.png"
        )

        GDSCorrPlot.savefig(out_file)
        logging.getLogger("GDSCorr").info(f"Plot saved: {out_file}")

        return out_file

    def run_query(self, gene_id, drug_name, drug_metric, corr_method):
        """
        Export the paired values, compute the correlation and plot it. The first failing step raises and the
        following steps are not executed.

        """
        table_file = self.export_gene_drug_table(gene_id, drug_name, drug_metric)

        res = self.gene_drug_correlation(gene_id, drug_name, drug_metric, corr_method)

        plot_file = self.plot_gene_drug(gene_id, drug_name, drug_metric, corr_method)

        return dict(res, table_file=table_file, plot_file=plot_file)

    def run_queries(self, queries, summary_file="correlation_summary.csv"):
        """
        Run several queries; queries referencing missing genes or drugs, or without enough overlapping
        cell lines, are reported in the summary instead of stopping the batch.

        :param queries: iterable of (gene_id, drug_name, drug_metric, corr_method)
        :return: pandas.DataFrame
        """
        results = []

        for gene_id, drug_name, drug_metric, corr_method in queries:
            try:
                res = dict(self.run_query(gene_id, drug_name, drug_metric, corr_method), status="ok")

            except QueryError as e:
                logging.getLogger("GDSCorr").warning(f"Skipped {gene_id} ~ {drug_name}: {e}")

                res = dict(
                    gene_id=str(gene_id),
                    drug_name=drug_name,
                    drug_metric=drug_metric,
                    method=corr_method,
                    status=type(e).__name__,
                )

            results.append(res)

        results = pd.DataFrame(results)

        os.makedirs(self.outdir, exist_ok=True)
        results.to_csv(os.path.join(self.outdir, summary_file), index=False)

        return results


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Gene-expression ~ drug-response correlation")
    parser.add_argument("gene_id")
    parser.add_argument("drug_name")
    parser.add_argument("--metric", default="ic50", choices=CorrelationExplorer.DRUG_METRICS)
    parser.add_argument("--method", default="spearman", choices=list(CorrelationExplorer.CORR_METHODS))
    parser.add_argument("--dataset", default="gdsc_dataset.pkl")
    parser.add_argument("--outdir", default=rpath)
    args = parser.parse_args()

    explorer = CorrelationExplorer(GDSCDataset.load(data_file(args.dataset)), outdir=args.outdir)
    explorer.run_query(args.gene_id, args.drug_name, args.metric, args.method)
