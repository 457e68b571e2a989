"""gradient_numerique

Rôle
	Vérification du gradient par différences finies centrées.

	On estime la dérivée de chaque poids avec:
		(J(w + eps) - J(w - eps)) / (2 * eps)

	où J est le coût dont la rétropropagation donne exactement le gradient
	(sortie sigmoïde, entropie croisée, régularisation non moyennée):
		J(W) = -1/m Σ_e Σ_k [d_k log(a_k) + (1 - d_k) log(1 - a_k)]
		       + lambda/2 Σ (poids hors biais)^2

	Le résultat se compare directement à `BackPropagation.run()`.

Coût
	Chaque dérivée demande deux propagations complètes sur tous les exemples:
	à réserver aux petits réseaux (tests, débogage).
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from retroprop import matrice
from retroprop.algorithme import Algorithme, Exemple, enregistre
from retroprop.backpp import BackPropagation
from retroprop.config import EPSILON_DEFAUT, REGULARISATION_DEFAUT, TOLERANCE_DEFAUT
from retroprop.erreurs import InvalidArgument
from retroprop.matrice import Matrix
from retroprop.reseau import Reseau

# borne pour éviter log(0) quand une sortie sature
_LOG_MIN = 1e-300


# ==================== cout =========================
def cout(reseau: Reseau, exemples: Sequence[Exemple], lambda_: float = 0.0) -> float:
	"""Coût d'entropie croisée moyen, plus lambda/2 * Σ w^2 (biais exclus)."""
	if len(exemples) == 0:
		raise InvalidArgument("Aucun exemple: coût indéfini.")

	total = 0.0
	for exemple in exemples:
		sortie = reseau.propagate(exemple.entree)[-1].values
		for a, d in zip(sortie, exemple.sortie):
			total -= d * math.log(max(a, _LOG_MIN)) + (1.0 - d) * math.log(max(1.0 - a, _LOG_MIN))
	J = total / len(exemples)

	if lambda_ != 0:
		J += lambda_ / 2.0 * sum(float(w) ** 2 for W in reseau.poids for row in W for w in row[1:])
	return J


# ==================== ecart_max =========================
def ecart_max(A: Sequence[Matrix], B: Sequence[Matrix]) -> float:
	"""Plus grand écart absolu entre deux listes de matrices de mêmes tailles."""
	if len(A) != len(B):
		raise InvalidArgument(f"Nombre de matrices différent: {len(A)} vs {len(B)}.")
	ecart = 0.0
	for Ma, Mb in zip(A, B):
		for row in matrice.subtract(Ma, Mb):
			for v in row:
				ecart = max(ecart, abs(v))
	return ecart


@enregistre("gradient_numerique")
class GradientNumerique(Algorithme):
	"""Dérivées estimées par différences finies (même sortie que BackPropagation).

	Options
		delta : ajouté comme delta / m (même rôle que pour la rétropropagation)
		regularization : multiplicateur lambda (défaut 0)
		epsilon : pas des différences finies (défaut 1e-4)
	"""

	defaults = {"regularization": REGULARISATION_DEFAUT, "epsilon": EPSILON_DEFAUT}

	# ==================== _derivee_poids =========================
	def _derivee_poids(self, i: int, r: int, c: int) -> float:
		eps = self.options.epsilon
		lambda_ = self.options.regularization

		poids_plus = matrice.clone_weights(self.network.poids)
		poids_moins = matrice.clone_weights(self.network.poids)
		poids_plus[i][r][c] += eps
		poids_moins[i][r][c] -= eps

		J_plus = cout(self.network.avec_poids(poids_plus), self.examples, lambda_)
		J_moins = cout(self.network.avec_poids(poids_moins), self.examples, lambda_)
		return (J_plus - J_moins) / (2.0 * eps)

	# ==================== run =========================
	def run(self) -> List[Matrix]:
		self._validate()

		out: List[Matrix] = []
		for i, W in enumerate(self.network.poids):
			out.append([[self._derivee_poids(i, r, c) for c in range(len(row))] for r, row in enumerate(W)])

		if self.options.delta is not None:
			m = len(self.examples)
			out = [matrice.add(D, matrice.scale(S, 1.0 / m)) for D, S in zip(out, self.options.delta)]
		return out


# ==================== verifie_gradient =========================
def verifie_gradient(
	reseau: Reseau,
	exemples: Sequence[object],
	options=None,
	tolerance: float = TOLERANCE_DEFAUT,
) -> Tuple[bool, float]:
	"""Compare rétropropagation et gradient numérique.

	Retourne (ok, ecart) avec ecart = plus grand écart absolu entre les deux.
	"""
	analytique = BackPropagation(reseau, exemples, options).run()
	numerique = GradientNumerique(reseau, exemples, options).run()
	ecart = ecart_max(analytique, numerique)
	return ecart <= tolerance, ecart
