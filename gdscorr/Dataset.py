#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves

import os
import logging
import tempfile
import pandas as pd
from gdscorr.Errors import SchemaError


class GDSCDataset:
    """
    Consolidated GDSC data-set: cell lines samplesheet, drug-response measurements and gene-expression matrix.
    Saved and loaded as a single pickled bundle.

    """

    PARTS = ["celllines", "drugresponse", "gexp"]

    def __init__(self, celllines, drugresponse, gexp):
        self.celllines = celllines
        self.drugresponse = drugresponse
        self.gexp = gexp

    @property
    def cosmic_ids(self):
        return list(self.celllines.index)

    @property
    def gene_ids(self):
        return list(self.gexp.index)

    @property
    def drug_names(self):
        return sorted(self.drugresponse["drug_name"].dropna().unique())

    def summary(self):
        return pd.Series(
            {
                "cell_lines": self.celllines.shape[0],
                "drug_measurements": self.drugresponse.shape[0],
                "drugs": self.drugresponse["drug_name"].nunique(),
                "genes": self.gexp.shape[0],
                "gexp_cell_lines": self.gexp.shape[1],
            }
        )

    def save(self, dataset_file):
        """
        Write the bundle to a temporary file next to dataset_file and move it in place, an interrupted
        write never leaves a partial data-set behind.

        """
        outdir = os.path.dirname(os.path.abspath(dataset_file))
        os.makedirs(outdir, exist_ok=True)

        fd, tmp_file = tempfile.mkstemp(dir=outdir, suffix=".tmp")
        os.close(fd)

        try:
            pd.to_pickle({p: getattr(self, p) for p in self.PARTS}, tmp_file)
            os.replace(tmp_file, dataset_file)

        finally:
            if os.path.exists(tmp_file):
                os.remove(tmp_file)

        logging.getLogger("GDSCorr").info(f"Data-set saved: {dataset_file}")

    @classmethod
    def load(cls, dataset_file):
        bundle = pd.read_pickle(dataset_file)

        if not isinstance(bundle, dict):
            raise SchemaError(f"{dataset_file} is not a GDSC data-set bundle")

        missing = [p for p in cls.PARTS if not isinstance(bundle.get(p), pd.DataFrame)]
        if len(missing) > 0:
            raise SchemaError(f"{dataset_file} is missing data-set parts: {'; '.join(missing)}")

        logging.getLogger("GDSCorr").info(f"Data-set loaded: {dataset_file}")

        return cls(**{p: bundle[p] for p in cls.PARTS})
