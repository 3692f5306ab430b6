from typing import Sequence, Optional, Union, BinaryIO
import matplotlib.pyplot as plt

from ..engine.models import ScenarioResult


def plot_curve(
    results: Sequence[ScenarioResult],
    out: Union[str, BinaryIO],
    sweet_spot: Optional[ScenarioResult] = None,
    title: str = "Análisis de Impuestos por Nivel de Salario",
):
    """
    Three series per swept salary, in sweep order:
      IRPF, IS + dividend tax, and the total.
    out is a file path or a binary file object (the HTML report passes a BytesIO).
    If sweet_spot is given, it gets a dashed vertical line and an annotated marker.
    """
    xs = [float(r.salary) for r in results]

    plt.figure(figsize=(11, 6))
    plt.plot(xs, [float(r.income_tax) for r in results], label="IRPF (Salario)", color="#ef4444", lw=2)
    plt.plot(xs, [float(r.corporate_and_dividend_tax) for r in results],
             label="IS + Impuesto Dividendos", color="#3b82f6", lw=2)
    plt.plot(xs, [float(r.total_tax) for r in results], label="TOTAL IMPUESTOS", color="#22c55e", lw=3)
    plt.xlabel("Salario (€)")
    plt.ylabel("Impuestos (€)")
    plt.title(title)
    plt.legend(loc="upper center")
    plt.grid(alpha=0.3)

    if sweet_spot is not None:
        ax = plt.gca()
        s_sal = float(sweet_spot.salary)
        s_tot = float(sweet_spot.total_tax)
        ax.axvline(s_sal, linestyle="--", color="grey")
        ax.scatter([s_sal], [s_tot], color="#22c55e", zorder=3)
        ax.annotate(
            f"Punto óptimo ({s_sal:,.0f} €)",
            xy=(s_sal, s_tot),
            xytext=(10, 12),
            textcoords="offset points",
            arrowprops=dict(arrowstyle="->", lw=0.8),
        )

    plt.tight_layout()
    if isinstance(out, str):
        plt.savefig(out, dpi=150)
    else:
        plt.savefig(out, format="png", dpi=150)
    plt.close()
