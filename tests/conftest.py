import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from gdscorr.Dataset import GDSCDataset
from gdscorr.GeneMapping import CachedGeneMap, GeneMapExclusions
from gdscorr.DataCleaner import DatasetCleaner


SAMPLES = [1001, 1002, 1003, 1004, 1005]


@pytest.fixture
def cellline_file(tmp_path):
    df = pd.DataFrame(
        {
            "Sample Name": ["A", "B", "C", "D", "E", "TOTAL:"],
            "COSMIC identifier": SAMPLES + [np.nan],
            "GDSC Tissue descriptor 1": ["lung", "lung", "breast", "skin", "large_intestine", np.nan],
            "GDSC Tissue descriptor 2": ["lung_NSCLC", "lung_SCLC", "breast", "melanoma", "colorectal", np.nan],
            "Cancer Type (matching TCGA label)": ["LUAD", "SCLC", "BRCA", "SKCM", "COAD/READ", np.nan],
            "Screen Medium": ["R", "R", "D/F12", "R", "D/F12", np.nan],
        }
    )

    path = tmp_path / "Cell_Lines_Details.csv"
    df.to_csv(path, index=False)

    return str(path)


@pytest.fixture
def drugresponse_file(tmp_path):
    rows = [
        # COSMIC_ID, DRUG_ID, DRUG_NAME, LN_IC50, AUC
        (1001, 1, "Temozolomide", "1.0", 0.9),
        (1001, 2, "Temozolomide", "3.0", 0.88),
        (1002, 1, "Temozolomide", "2.5", 0.85),
        (1003, 1, "Temozolomide", "3.0", 0.8),
        (1004, 1, "Temozolomide", "4.0", 0.7),
        (1005, 1, "Temozolomide", "5.0", 0.6),
        (9999, 1, "Temozolomide", "0.5", 0.95),
        (1001, 3, "Drug X", "1.2", 0.5),
        (1002, 3, "Drug X", "1.4", 0.6),
        (1001, 4, "Drug Y", "-1.0", 0.5),
        (1002, 4, "Drug Y", "0.0", 0.6),
        (1003, 4, "Drug Y", "not tested", 0.7),
        (1004, 4, "Drug Y", "2.0", 0.8),
    ]

    df = pd.DataFrame(rows, columns=["COSMIC_ID", "DRUG_ID", "DRUG_NAME", "LN_IC50", "AUC"])
    df = df.assign(
        CELL_LINE_NAME=df["COSMIC_ID"].astype(str),
        MIN_CONC=0.01,
        MAX_CONC="10.0",
        RMSE=0.1,
        Z_SCORE=-0.5,
    )

    path = tmp_path / "GDSC_fitted_dose_response.csv"
    df.to_csv(path, index=False)

    return str(path)


@pytest.fixture
def gexp_file(tmp_path):
    df = pd.DataFrame(
        [
            ["EGFR", "epidermal growth factor receptor", 8.0, 7.5, 6.0, 5.0, 4.0, 3.0],
            ["TP53", "tumor protein p53", 3.1, 3.5, 2.9, 4.0, np.nan, 3.3],
            ["BRAF", "B-Raf proto-oncogene", 5.0, 5.1, 5.2, 5.3, 5.4, 5.5],
            ["DUPA", "ambiguous symbol", 1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
            ["KRAS", "KRAS proto-oncogene", 2.0, 2.0, 3.0, 3.0, 4.0, 4.0],
            ["KRASP1", "KRAS pseudogene 1", 9.0, 9.0, 9.0, 9.0, 9.0, 9.0],
            ["NOMAP", "no Entrez ID", 1.0, 1.0, 1.0, 1.0, 1.0, 1.0],
            [np.nan, "array feature without symbol", 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
        ],
        columns=["GENE_SYMBOLS", "GENE_title"] + [f"DATA.{s}" for s in SAMPLES + [7777]],
    )

    path = tmp_path / "Cell_line_RMA_proc_basalExp.txt"
    df.to_csv(path, sep="\t", index=False)

    return str(path)


@pytest.fixture
def gene_map():
    df = pd.DataFrame(
        [
            ("EGFR", "1956"),
            ("TP53", "7157"),
            ("BRAF", "673"),
            ("DUPA", "1111"),
            ("DUPA", "2222"),
            ("NOMAP", None),
            ("KRAS", "3845"),
            ("KRASP1", "3845"),
            ("ORPHAN", "999"),
        ],
        columns=["symbol", "entrez_id"],
    )
    df.index.name = "row_id"

    return df


@pytest.fixture
def gene_map_file(tmp_path, gene_map):
    path = tmp_path / "gene_map_cache.csv"
    gene_map.to_csv(path)

    return str(path)


@pytest.fixture
def exclusions():
    return GeneMapExclusions(entrez_ids=["2222"], row_ids=[7])


@pytest.fixture
def cleaner(tmp_path, cellline_file, drugresponse_file, gexp_file, gene_map_file, exclusions):
    return DatasetCleaner(
        cellline_file=cellline_file,
        drugresponse_file=drugresponse_file,
        gexp_file=gexp_file,
        gene_map=CachedGeneMap(gene_map_file),
        exclusions=exclusions,
        dataset_file=str(tmp_path / "gdsc_dataset.pkl"),
    )


@pytest.fixture
def dataset(cleaner):
    return cleaner.run(save=False)


@pytest.fixture
def saved_dataset(cleaner):
    cleaner.run(save=True)

    return GDSCDataset.load(cleaner.dataset_file)
