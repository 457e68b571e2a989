"""backpp

Rôle
	Calcul des dérivées (gradients) des poids d'un réseau par rétropropagation.

	Le module ne fait pas de descente de gradient : il retourne une matrice de
	dérivées par matrice de poids, à combiner avec un taux d'apprentissage par
	l'appelant.

Algorithme (pour chaque exemple (x, d))
	1) propagation avant: activations = reseau.propagate(x)
	2) erreur de sortie: e_L = a_L - d
	3) couches cachées (de la fin vers le début, entrée exclue):
		e_j = (W_j sans biais)^T @ e_{j+1} ⊙ F'(raw_j)
	4) accumulation: delta_j += e_{j+1} ⊗ [1, a_j]
Puis:
	derivee_j = delta_j / m  (+ lambda * W_j hors colonne de biais)

Notes
	- L'accumulation est un pli (fold) : chaque exemple produit de nouvelles
	  matrices, l'accumulateur n'est jamais partagé ni modifié en place.
	- Le terme de régularisation n'est pas divisé par le nombre d'exemples.
	- Avec regularization == 0, l'étape de régularisation est sautée.
"""

from __future__ import annotations

from typing import List, Sequence

from retroprop import matrice
from retroprop.algorithme import Algorithme, Exemple, enregistre
from retroprop.config import REGULARISATION_DEFAUT
from retroprop.erreurs import InvalidArgument
from retroprop.matrice import Matrix, Vector
from retroprop.reseau import Activation, Reseau


# ==================== sans_biais =========================
def sans_biais(W: Matrix) -> Matrix:
	"""Retire la colonne de biais (colonne 0) d'une matrice de poids."""
	return [[float(v) for v in row[1:]] for row in W]


# ==================== regularisation =========================
def regularisation(W: Matrix, lambda_: float) -> Matrix:
	"""Terme de régularisation d'une matrice de poids.

	Colonne de biais -> 0, autres poids -> w * lambda.
	"""

	def _terme(w: float, ligne: int, colonne: int) -> float:
		if colonne == 0:
			return 0.0
		return w * lambda_

	return matrice.map_elements(W, _terme)


# ==================== erreurs =========================
def erreurs(reseau: Reseau, activations: Sequence[Activation], sortie: Sequence[float]) -> List[Vector]:
	"""Signaux d'erreur de chaque couche calculée, dans l'ordre entrée -> sortie.

	Retour
		liste de L-1 vecteurs; l'élément j est l'erreur de la couche j+1
		(donc associé à la matrice de poids j).
	"""
	# erreur de la couche de sortie (seul endroit où la sortie désirée intervient)
	errors = [matrice.vec_sub(activations[-1].values, sortie)]

	# couches cachées, de l'avant-dernière vers la première (entrée exclue)
	for j in range(len(activations) - 2, 0, -1):
		W_t = matrice.transpose(sans_biais(reseau.poids[j]))
		propagee = matrice.matvec(W_t, errors[-1])
		errors.append(matrice.vec_mul(propagee, reseau.derivee(activations[j].raw)))

	errors.reverse()
	return errors


# ==================== contribution =========================
def contribution(reseau: Reseau, exemple: Exemple) -> List[Matrix]:
	"""Contribution d'un seul exemple à l'accumulateur (non moyennée).

	Une matrice par matrice de poids: e_{j+1} ⊗ [1, a_j].
	"""
	activations = reseau.propagate(exemple.entree)
	errors = erreurs(reseau, activations, exemple.sortie)

	out: List[Matrix] = []
	for j, error in enumerate(errors):
		biased_output = matrice.to_matrix(matrice.add_bias_unit(activations[j].values))
		new_delta = matrice.matmul(matrice.transpose(matrice.to_matrix(error)), biased_output)
		if matrice.shape(new_delta) != matrice.shape(reseau.poids[j]):
			raise InvalidArgument(
				f"Couche {j}: contribution {matrice.shape_str(new_delta)} incompatible avec "
				f"les poids {matrice.shape_str(reseau.poids[j])} (tailles de couches incohérentes)."
			)
		out.append(new_delta)
	return out


# ==================== accumule =========================
def accumule(delta: Sequence[Matrix], contributions: Sequence[Matrix]) -> List[Matrix]:
	"""Retourne un nouvel accumulateur: delta + contributions (matrice par matrice)."""
	if len(delta) != len(contributions):
		raise InvalidArgument(
			f"Accumulation impossible: {len(delta)} matrices delta pour {len(contributions)} contributions."
		)
	return [matrice.add(D, C) for D, C in zip(delta, contributions)]


# ==================== derivees =========================
def derivees(delta: Sequence[Matrix], poids: Sequence[Matrix], m: int, lambda_: float) -> List[Matrix]:
	"""Moyenne des deltas sur m exemples, plus la régularisation si lambda != 0."""
	if m <= 0:
		raise InvalidArgument("Aucun exemple: impossible de moyenner les dérivées.")

	out: List[Matrix] = []
	for D, W in zip(delta, poids):
		derivee = matrice.scale(D, 1.0 / m)
		if lambda_ != 0:
			derivee = matrice.add(derivee, regularisation(W, lambda_))
		out.append(derivee)
	return out


@enregistre("backpropagation")
class BackPropagation(Algorithme):
	"""Rétropropagation.

	Usage
		bp = BackPropagation(reseau, exemples, {"regularization": 0.1})
		derivees = bp.run()

	Options
		delta : matrices initiales de l'accumulateur (ex. vérification du
			gradient, reprise), sinon zéro
		regularization : multiplicateur lambda (défaut 0)
	"""

	defaults = {"regularization": REGULARISATION_DEFAUT}

	# ==================== run =========================
	def run(self) -> List[Matrix]:
		"""Calcule les dérivées, une matrice par matrice de poids (mêmes tailles)."""
		self._validate()

		if self.options.delta is not None:
			delta = matrice.clone_weights(self.options.delta)
		else:
			delta = matrice.zero_weights(self.network.couches)

		for exemple in self.examples:
			delta = accumule(delta, contribution(self.network, exemple))

		return derivees(delta, self.network.poids, len(self.examples), self.options.regularization)
