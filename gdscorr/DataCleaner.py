#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves

import logging
import argparse
from gdscorr.Dataset import GDSCDataset
from gdscorr.GDSCorrUtils import data_file
from gdscorr.DataImporter import CellLines, DrugResponse, GeneExpression
from gdscorr.GeneMapping import CachedGeneMap, GeneMapExclusions, reconcile_gene_map


class DatasetCleaner:
    """
    Builds the consolidated GDSC data-set from the raw exports: cell lines samplesheet, fitted dose-response
    and RMA gene-expression. Gene symbols are replaced by Entrez IDs using the gene map source and the
    curated exclusion lists.

    """

    def __init__(
        self,
        cellline_file="raw/Cell_Lines_Details.csv",
        drugresponse_file="raw/GDSC_fitted_dose_response.csv",
        gexp_file="raw/Cell_line_RMA_proc_basalExp.txt",
        gexp_sep="\t",
        gene_map=None,
        exclusions=None,
        dataset_file="gdsc_dataset.pkl",
    ):
        self.cellline_file = cellline_file
        self.drugresponse_file = drugresponse_file
        self.gexp_file = gexp_file
        self.gexp_sep = gexp_sep
        self.dataset_file = dataset_file

        self.gene_map = CachedGeneMap() if gene_map is None else gene_map
        self.exclusions = GeneMapExclusions.from_csv() if exclusions is None else exclusions

    def run(self, save=True):
        # Cell lines
        celllines = CellLines(self.cellline_file).clean()

        # Drug response
        drugresponse = DrugResponse(self.drugresponse_file).clean()

        # Gene expression
        gexp_obj = GeneExpression(self.gexp_file, sep=self.gexp_sep)

        symbols = gexp_obj.symbols()
        gmap = reconcile_gene_map(self.gene_map.resolve(symbols), symbols, self.exclusions)

        gexp = gexp_obj.clean(gmap, celllines.index)

        dataset = GDSCDataset(celllines, drugresponse, gexp)

        logging.getLogger("GDSCorr").info(
            "; ".join(f"#({k})={v}" for k, v in dataset.summary().items())
        )

        if save:
            dataset.save(data_file(self.dataset_file))

        return dataset


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Build the consolidated GDSC data-set from the raw exports")
    parser.add_argument("--celllines", default="raw/Cell_Lines_Details.csv")
    parser.add_argument("--drugresponse", default="raw/GDSC_fitted_dose_response.csv")
    parser.add_argument("--gexp", default="raw/Cell_line_RMA_proc_basalExp.txt")
    parser.add_argument("--gene-map", default="meta/gene_map_cache.csv")
    parser.add_argument("--exclusions", default="meta/gene_map_exclusions.csv")
    parser.add_argument("--out", default="gdsc_dataset.pkl")
    args = parser.parse_args()

    DatasetCleaner(
        cellline_file=args.celllines,
        drugresponse_file=args.drugresponse,
        gexp_file=args.gexp,
        gene_map=CachedGeneMap(args.gene_map),
        exclusions=GeneMapExclusions.from_csv(args.exclusions),
        dataset_file=args.out,
    ).run()
