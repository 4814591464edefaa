#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves

import seaborn as sns
import matplotlib.pyplot as plt


class GDSCorrPlot:
    # - DEFAULT AESTHETICS
    SNS_RC = {
        "axes.linewidth": 0.3,
        "xtick.major.width": 0.3,
        "ytick.major.width": 0.3,
        "xtick.major.size": 2.5,
        "ytick.major.size": 2.5,
        "xtick.minor.width": 0.3,
        "ytick.minor.width": 0.3,
        "xtick.minor.size": 1.5,
        "ytick.minor.size": 1.5,
        "xtick.direction": "in",
        "ytick.direction": "in",
    }

    PAL_SET2 = sns.color_palette("Set2", n_colors=8).as_hex()
    PAL_GDSCORR = [PAL_SET2[1], "#E1E1E1", "#656565"]

    METRIC_LABELS = dict(ic50="log2 IC50", auc="AUC")

    @classmethod
    def plot_corrplot(cls, x, y, dataframe, title=None, annot_text=None, fit_reg=True):
        grid = sns.JointGrid(data=dataframe, x=x, y=y, space=0)

        # Joint
        grid.ax_joint.scatter(
            x=dataframe[x],
            y=dataframe[y],
            edgecolor="w",
            lw=0.05,
            s=10,
            color=cls.PAL_GDSCORR[2],
            alpha=0.8,
        )

        if fit_reg:
            sns.regplot(
                x=x,
                y=y,
                data=dataframe,
                scatter=False,
                truncate=True,
                line_kws=dict(lw=1.0, color=cls.PAL_GDSCORR[0]),
                ax=grid.ax_joint,
            )

        # Marginals
        grid.plot_marginals(sns.histplot, kde=False, linewidth=0, color=cls.PAL_GDSCORR[2])

        # Annotation
        if annot_text is not None:
            grid.ax_joint.text(
                0.95,
                0.05,
                annot_text,
                fontsize=4,
                transform=grid.ax_joint.transAxes,
                ha="right",
            )

        # Extra
        grid.ax_joint.grid(True, ls="-", lw=0.1, alpha=1.0, zorder=0, axis="both")

        if title is not None:
            grid.figure.suptitle(title, y=1.02, fontsize=6)

        return grid

    @classmethod
    def plot_gene_drug(cls, plot_df, gene_id, drug_name, drug_metric, corr, pval, corr_method):
        title = f"Gene {gene_id} expression vs {drug_metric} of {drug_name}"
        annot_text = f"{'R' if corr_method == 'pearson' else 'Rho'}={corr:.3g}, p={pval:.1e}, N={plot_df.shape[0]}"

        grid = cls.plot_corrplot(gene_id, drug_metric, plot_df, title=title, annot_text=annot_text)

        grid.set_axis_labels(
            f"{gene_id} gene-expression (RMA)",
            f"{drug_name} ({cls.METRIC_LABELS.get(drug_metric, drug_metric)})",
        )

        return grid

    @staticmethod
    def savefig(path, dpi=300):
        plt.savefig(path, bbox_inches="tight", dpi=dpi)
        plt.close("all")
