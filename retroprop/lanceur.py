"""lanceur

Rôle
	Point d'entrée en ligne de commande: construit un réseau, calcule les
	dérivées par rétropropagation et les affiche.

Usage
	python -m retroprop.lanceur
	python -m retroprop.lanceur --couches 2 3 1 --regularisation 0.1 --seed 7
	python -m retroprop.lanceur --fichier data_vc.txt --couches 12 8 10 --verifie

Sans `--fichier`, les quatre exemples XOR intégrés sont utilisés.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Sequence

from retroprop.algorithme import cree_algorithme
from retroprop.config import COUCHES_XOR, EXEMPLES_XOR, PRECISION_AFFICHAGE
from retroprop.erreurs import RetropropError
from retroprop.gradient_numerique import verifie_gradient
from retroprop.loader import load_exemples
from retroprop.matrice import Matrix, matrix_lines, shape_str
from retroprop.reseau import Reseau


# ==================== lignes_derivees =========================
def lignes_derivees(derivees: Sequence[Matrix], precision: int = PRECISION_AFFICHAGE) -> List[str]:
	"""Lignes d'affichage des dérivées (une matrice par couche)."""
	out: List[str] = []
	for j, D in enumerate(derivees):
		out.append(f"dJ/dW{j + 1} {shape_str(D)} =")
		out.extend("\t" + line for line in matrix_lines(D, precision=precision))
	return out


# ==================== affiche_derivees =========================
def affiche_derivees(derivees: Sequence[Matrix], precision: int = PRECISION_AFFICHAGE) -> None:
	print("\n".join(lignes_derivees(derivees, precision)))


# ==================== _parser =========================
def _parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="Calcule les dérivées des poids d'un MLP par rétropropagation")
	parser.add_argument("--couches", type=int, nargs="+", default=list(COUCHES_XOR), help="Neurones par couche (entrée ... sortie)")
	parser.add_argument("--fichier", default=None, help="Fichier d'exemples au format 'label: x1 x2 ...'")
	parser.add_argument("--regularisation", type=float, default=0.0, help="Multiplicateur de régularisation (lambda)")
	parser.add_argument("--seed", type=int, default=None, help="Graine des poids initiaux")
	parser.add_argument("--precision", type=int, default=PRECISION_AFFICHAGE, help="Précision d'affichage")
	parser.add_argument("--verifie", action="store_true", help="Compare avec le gradient numérique")
	return parser


# ==================== main =========================
def main(argv: Sequence[str] | None = None) -> int:
	args = _parser().parse_args(argv)

	try:
		reseau = Reseau(args.couches, seed=args.seed)
		if args.fichier:
			exemples = load_exemples(args.fichier, n_in=reseau.n_in, nb_sorties=reseau.n_out, seed=args.seed)
		else:
			exemples = list(EXEMPLES_XOR)

		options = {"regularization": args.regularisation}
		derivees = cree_algorithme("backpropagation", reseau, exemples, options).run()

		reseau.affiche(args.precision)
		print(f"--- Dérivées ({len(exemples)} exemples, lambda={args.regularisation}) ---")
		affiche_derivees(derivees, args.precision)

		if args.verifie:
			ok, ecart = verifie_gradient(reseau, exemples, options)
			print(f"Vérification du gradient: écart max = {ecart:.3e} ({'OK' if ok else 'ÉCHEC'})")
	except (RetropropError, OSError) as exc:
		print(f"Erreur: {exc}", file=sys.stderr)
		return 2
	return 0


if __name__ == "__main__":
	sys.exit(main())
