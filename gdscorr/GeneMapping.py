#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves

import os
import logging
import argparse
import requests
import pandas as pd
from gdscorr.GDSCorrUtils import data_file
from gdscorr.Errors import SchemaError, UnresolvedMappingError


MAP_COLUMNS = ["symbol", "entrez_id"]


def entrez_to_str(values):
    # 2222, 2222.0 and "2222" are the same Entrez ID
    return values.astype(str).str.strip().str.replace(r"\.0+$", "", regex=True)


class GeneMapSource:
    """
    Source of gene symbol to Entrez ID correspondences.

    Subclasses implement resolve(symbols), returning a data-frame indexed by row_id with the columns
    symbol and entrez_id. Symbols can appear in several rows (ambiguous mapping), as can Entrez IDs
    (convergent mapping), and entrez_id can be missing.

    """

    def resolve(self, symbols):
        raise NotImplementedError

    @staticmethod
    def read_map(map_file):
        gmap = pd.read_csv(map_file, index_col="row_id", dtype=dict(symbol=str, entrez_id=str))

        missing = [c for c in MAP_COLUMNS if c not in gmap.columns]
        if len(missing) > 0:
            raise SchemaError(f"Gene map {map_file} is missing columns: {'; '.join(missing)}")

        return gmap[MAP_COLUMNS]


class CachedGeneMap(GeneMapSource):
    """
    Precomputed gene map stored as CSV (row_id, symbol, entrez_id), built out-of-band with
    `python -m gdscorr.GeneMapping`.

    """

    def __init__(self, cache_file="meta/gene_map_cache.csv"):
        self.cache_file = cache_file

        if not os.path.exists(data_file(self.cache_file)):
            raise FileNotFoundError(
                f"Gene map cache {data_file(self.cache_file)} not found, "
                f"build it first with: python -m gdscorr.GeneMapping"
            )

        self.gmap = self.read_map(data_file(self.cache_file))

    def resolve(self, symbols):
        return self.gmap[self.gmap["symbol"].isin(set(symbols))].copy()


class MyGeneInfoMap(GeneMapSource):
    """
    Live gene map queried from MyGene.info (https://mygene.info). The service is slow and rate-limited,
    use it once through build_gene_map_cache and read the cache with CachedGeneMap afterwards.

    """

    URL = "https://mygene.info/v3/query"

    def __init__(self, species="human", batch_size=1000, timeout=60):
        self.species = species
        self.batch_size = batch_size
        self.timeout = timeout

    def query(self, symbols):
        response = requests.post(
            self.URL,
            data=dict(
                q=",".join(symbols),
                scopes="symbol",
                fields="entrezgene",
                species=self.species,
            ),
            timeout=self.timeout,
        )
        response.raise_for_status()

        return [
            dict(symbol=hit["query"], entrez_id=None if "entrezgene" not in hit else str(hit["entrezgene"]))
            for hit in response.json()
        ]

    def resolve(self, symbols):
        symbols = sorted(set(symbols))

        rows = []
        for i in range(0, len(symbols), self.batch_size):
            batch = symbols[i : i + self.batch_size]
            logging.getLogger("GDSCorr").info(
                f"MyGene.info query: symbols {i + 1}-{i + len(batch)} of {len(symbols)}"
            )
            rows.extend(self.query(batch))

        gmap = pd.DataFrame(rows, columns=MAP_COLUMNS)
        gmap.index.name = "row_id"

        return gmap


def build_gene_map_cache(symbols, cache_file="meta/gene_map_cache.csv", source=None):
    """
    Resolve symbols with a (slow) gene map source and store the result, row_id included, as the cache read
    by CachedGeneMap. The row_ids written here are the ones referenced by the exclusion lists.

    """
    source = MyGeneInfoMap() if source is None else source

    gmap = source.resolve(symbols)

    cache_file = data_file(cache_file)
    os.makedirs(os.path.dirname(cache_file), exist_ok=True)
    gmap.to_csv(cache_file)

    logging.getLogger("GDSCorr").info(f"Gene map cached: {cache_file}; rows={gmap.shape[0]}")

    return gmap


class GeneMapExclusions:
    """
    Manually curated exclusion lists used to turn the gene map into a 1:1 relation: Entrez IDs to drop
    and specific gene map rows (row_id) to drop.

    """

    KINDS = ["entrez_id", "row_id"]

    def __init__(self, entrez_ids=None, row_ids=None):
        self.entrez_ids = set() if entrez_ids is None else {str(i) for i in entrez_ids}
        self.row_ids = set() if row_ids is None else {int(i) for i in row_ids}

    @classmethod
    def from_csv(cls, exclusions_file="meta/gene_map_exclusions.csv"):
        df = pd.read_csv(data_file(exclusions_file), dtype=str, comment="#")

        if "kind" not in df.columns or "value" not in df.columns:
            raise SchemaError(f"Exclusions file {exclusions_file} must have the columns kind and value")

        unknown = set(df["kind"]).difference(cls.KINDS)
        if len(unknown) > 0:
            raise SchemaError(f"Unknown exclusion kinds: {'; '.join(sorted(unknown))}")

        return cls(
            entrez_ids=df.query("kind == 'entrez_id'")["value"].str.strip(),
            row_ids=df.query("kind == 'row_id'")["value"].str.strip(),
        )

    def is_excluded(self, gene_map):
        return gene_map["entrez_id"].isin(self.entrez_ids) | gene_map.index.isin(self.row_ids)

    def __len__(self):
        return len(self.entrez_ids) + len(self.row_ids)


def reconcile_gene_map(gene_map, symbols, exclusions=None):
    """
    Resolve the gene map into a 1:1 relation between gene symbols and Entrez IDs.

    Symbols without Entrez ID are discarded and rows flagged by the exclusion lists are dropped (both lists
    are one drop set). Any symbol mapping to several Entrez IDs, or Entrez ID claimed by several symbols,
    left afterwards raises UnresolvedMappingError.

    :param gene_map: pandas.DataFrame indexed by row_id with columns symbol and entrez_id
    :param symbols: gene symbols to map
    :param exclusions: GeneMapExclusions
    :return: pandas.DataFrame sorted by symbol
    """
    exclusions = GeneMapExclusions() if exclusions is None else exclusions

    gmap = gene_map[gene_map["symbol"].isin(set(symbols))]
    gmap = gmap.dropna(subset=["entrez_id"])
    gmap = gmap.assign(entrez_id=entrez_to_str(gmap["entrez_id"]))

    excluded = exclusions.is_excluded(gmap)
    gmap = gmap[~excluded]

    logging.getLogger("GDSCorr").info(
        f"Gene map: rows={gene_map.shape[0]}; excluded={excluded.sum()}; kept={gmap.shape[0]}"
    )

    # Ambiguous symbols
    dup_symbols = gmap[gmap["symbol"].duplicated(keep=False)]
    if len(dup_symbols) > 0:
        raise UnresolvedMappingError(
            "Gene symbols mapping to multiple Entrez IDs: "
            + "; ".join(f"{s}={','.join(df['entrez_id'])}" for s, df in dup_symbols.groupby("symbol"))
        )

    # Convergent Entrez IDs
    dup_ids = gmap[gmap["entrez_id"].duplicated(keep=False)]
    if len(dup_ids) > 0:
        raise UnresolvedMappingError(
            "Entrez IDs claimed by multiple gene symbols: "
            + "; ".join(f"{i}={','.join(df['symbol'])}" for i, df in dup_ids.groupby("entrez_id"))
        )

    return gmap.sort_values("symbol")


if __name__ == "__main__":
    from gdscorr.DataImporter import GeneExpression

    parser = argparse.ArgumentParser(description="Build the gene symbol to Entrez ID cache from MyGene.info")
    parser.add_argument("--gexp", default="raw/Cell_line_RMA_proc_basalExp.txt")
    parser.add_argument("--out", default="meta/gene_map_cache.csv")
    parser.add_argument("--batch-size", type=int, default=1000)
    args = parser.parse_args()

    build_gene_map_cache(
        GeneExpression(args.gexp).symbols(),
        cache_file=args.out,
        source=MyGeneInfoMap(batch_size=args.batch_size),
    )
