"""smoke_test

Rôle
	Tests rapides des éléments critiques de `retroprop/`.

Objectifs
	- Vérifier les dérivées de `BackPropagation.run()` sur des cas calculés à
	  la main (réseau 2 -> 1).
	- Vérifier les propriétés du calcul: tailles, moyenne sur les exemples,
	  seed `delta`, colonne de biais exclue, régularisation nulle.
	- Comparer avec le gradient numérique (différences finies).
	- Vérifier les cas d'erreur (`InvalidArgument`, `ComputationError`).
	- Vérifier le loader et le lanceur (sans fichier de données du dépôt).

Exécution
	- `python -m retroprop.smoke_test`
	- ou `pytest` (les fonctions `test_*` sont collectées)
"""

from __future__ import annotations

import contextlib
import io
import math
import random
import tempfile
from pathlib import Path

from retroprop import matrice
from retroprop.algorithme import Exemple, Options, cree_algorithme
from retroprop.backpp import BackPropagation, contribution, erreurs, regularisation, sans_biais
from retroprop.erreurs import ComputationError, InvalidArgument
from retroprop.fct_activation import sigmoide, sigmoide_derivee, sigmoide_et_derivative
from retroprop.gradient_numerique import GradientNumerique, ecart_max, verifie_gradient
from retroprop.reseau import Reseau


# ==================== assert_close =========================
def assert_close(name: str, a, b, *, rel_tol: float = 1e-9, abs_tol: float = 1e-12) -> None:
	"""Compare récursivement nombres / listes de nombres avec tolérance."""
	if isinstance(a, (int, float)) and isinstance(b, (int, float)):
		if not math.isclose(float(a), float(b), rel_tol=rel_tol, abs_tol=abs_tol):
			raise AssertionError(f"{name}: {a} != {b} (abs diff={abs(float(a) - float(b))})")
		return

	if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
		if len(a) != len(b):
			raise AssertionError(f"{name}: longueurs différentes {len(a)} vs {len(b)}")
		for i, (ai, bi) in enumerate(zip(a, b)):
			assert_close(f"{name}[{i}]", ai, bi, rel_tol=rel_tol, abs_tol=abs_tol)
		return

	raise TypeError(f"{name}: types incompatibles {type(a).__name__} vs {type(b).__name__}")


# ==================== assert_raises =========================
def assert_raises(exc_type, fn, *args, **kwargs):
	"""Vérifie que fn(*args, **kwargs) lève exc_type et retourne l'exception."""
	try:
		fn(*args, **kwargs)
	except exc_type as exc:
		return exc
	raise AssertionError(f"{getattr(fn, '__name__', fn)} devait lever {exc_type.__name__}")


# ==================== _reseau_2_1 =========================
def _reseau_2_1() -> Reseau:
	"""Réseau 2 entrées -> 1 sortie, W = [[b, w1, w2]] = [[0.1, 0.2, 0.3]]."""
	return Reseau([2, 1], poids=[[[0.1, 0.2, 0.3]]])


# ==================== _exemples_aleatoires =========================
def _exemples_aleatoires(n_in: int, n_out: int, n: int, seed: int):
	rng = random.Random(seed)
	return [
		([rng.uniform(-1.0, 1.0) for _ in range(n_in)], [float(rng.random() < 0.5) for _ in range(n_out)])
		for _ in range(n)
	]


# ==================== test_sigmoide =========================
def test_sigmoide():
	assert sigmoide(0.0) == 0.5
	assert sigmoide_derivee(0.0) == 0.25
	Fi, Fp = sigmoide_et_derivative(0.6)
	assert_close("Fi", Fi, sigmoide(0.6))
	assert_close("Fp", Fp, sigmoide_derivee(0.6))
	# pas d'overflow pour les grandes valeurs
	assert sigmoide(-1000.0) == 0.0
	assert sigmoide(1000.0) == 1.0

	# le réseau est toujours sigmoïde: pas de choix d'activation
	reseau = _reseau_2_1()
	assert_close("derivee", reseau.derivee([0.0, 0.6]), [0.25, sigmoide_derivee(0.6)])
	assert_raises(TypeError, Reseau, [2, 1], n_fct=3)


# ==================== test_propagate =========================
def test_propagate():
	reseau = _reseau_2_1()
	activations = reseau.propagate([1, 1])
	assert len(activations) == 2
	assert activations[0].raw == [1.0, 1.0]
	assert activations[0].values == [1.0, 1.0]
	assert reseau.weights is reseau.poids
	assert_close("raw", activations[1].raw, [0.6])
	assert_close("values", activations[1].values, [sigmoide(0.6)])

	assert_raises(ComputationError, reseau.propagate, [1.0])
	assert_raises(ComputationError, reseau.propagate, ["a", 1.0])
	# valeurs non finies en entrée ou produites par une couche
	assert_raises(ComputationError, reseau.propagate, [float("nan"), 1.0])
	assert_raises(ComputationError, reseau.propagate, [float("inf"), 1.0])
	nan_poids = Reseau([2, 1], poids=[[[float("nan"), 0.2, 0.3]]])
	assert_raises(ComputationError, nan_poids.propagate, [1.0, 1.0])
	assert_raises(ComputationError, BackPropagation(reseau, [([float("nan"), 1.0], [0.0])]).run)


# ==================== test_scenario_sans_regularisation =========================
def test_scenario_sans_regularisation():
	"""Réseau 2 -> 1, exemple ([1, 1], [0]): dérivée = erreur * [1, x1, x2]."""
	reseau = _reseau_2_1()
	derivees = BackPropagation(reseau, [{"input": [1, 1], "output": [0]}], {"regularization": 0}).run()

	erreur = sigmoide(0.6) - 0.0
	assert len(derivees) == 1
	assert matrice.shape(derivees[0]) == (1, 3)
	assert_close("D", derivees[0], [[erreur, erreur * 1.0, erreur * 1.0]])


# ==================== test_scenario_regularisation =========================
def test_scenario_regularisation():
	"""lambda = 1: biais inchangé, autres dérivées augmentées de w * 1."""
	reseau = _reseau_2_1()
	exemples = [{"input": [1, 1], "output": [0]}]
	sans = BackPropagation(reseau, exemples).run()
	avec = BackPropagation(reseau, exemples, {"regularization": 1, "delta": [[[0.0, 0.0, 0.0]]]}).run()

	assert_close("biais", avec[0][0][0], sans[0][0][0])
	assert_close("w1", avec[0][0][1], sans[0][0][1] + 0.2)
	assert_close("w2", avec[0][0][2], sans[0][0][2] + 0.3)


# ==================== test_forme =========================
def test_forme():
	"""Une dérivée par matrice de poids, de même taille."""
	for couches, seed in (([2, 1], 0), ([3, 4, 2], 1), ([4, 5, 3, 2], 2), ([1, 1, 1, 1, 1], 3)):
		reseau = Reseau(couches, seed=seed)
		exemples = _exemples_aleatoires(couches[0], couches[-1], 5, seed)
		derivees = BackPropagation(reseau, exemples, {"regularization": 0.5}).run()
		assert len(derivees) == len(reseau.poids)
		for D, W in zip(derivees, reseau.poids):
			assert matrice.shape(D) == matrice.shape(W), f"{couches}: {matrice.shape_str(D)} != {matrice.shape_str(W)}"


# ==================== test_regularisation_nulle =========================
def test_regularisation_nulle():
	"""lambda = 0 donne exactement la moyenne des contributions."""
	reseau = Reseau([3, 4, 2], seed=11)
	exemples = [Exemple(tuple(x), tuple(d)) for x, d in _exemples_aleatoires(3, 2, 6, 11)]

	derivees = BackPropagation(reseau, exemples, {"regularization": 0}).run()

	somme = matrice.zero_weights(reseau.couches)
	for exemple in exemples:
		somme = [matrice.add(S, C) for S, C in zip(somme, contribution(reseau, exemple))]
	attendu = [matrice.scale(S, 1.0 / len(exemples)) for S in somme]
	assert_close("derivees", derivees, attendu)


# ==================== test_biais_exclu =========================
def test_biais_exclu():
	"""La colonne de biais ne rétropropage pas d'erreur et n'est pas régularisée."""
	W = [[0.5, -1.0, 2.0], [3.0, 0.25, -0.5]]
	R = regularisation(W, 7.0)
	assert [row[0] for row in R] == [0.0, 0.0]
	assert_close("R", R, [[0.0, -7.0, 14.0], [0.0, 1.75, -3.5]])
	assert sans_biais(W) == [[-1.0, 2.0], [0.25, -0.5]]

	# Deux réseaux qui ne diffèrent que par le biais de la dernière couche:
	# à activations égales, les erreurs des couches cachées sont identiques.
	reseau_a = Reseau([2, 3, 2], seed=5)
	poids_b = matrice.clone_weights(reseau_a.poids)
	for row in poids_b[1]:
		row[0] += 10.0
	reseau_b = reseau_a.avec_poids(poids_b)

	activations = reseau_a.propagate([0.3, -0.7])
	err_a = erreurs(reseau_a, activations, [1.0, 0.0])
	err_b = erreurs(reseau_b, activations, [1.0, 0.0])
	assert_close("erreurs", err_a, err_b)

	# La dérivée du biais ne dépend pas de lambda.
	exemples = _exemples_aleatoires(2, 2, 3, 5)
	d0 = BackPropagation(reseau_a, exemples, {"regularization": 0}).run()
	d3 = BackPropagation(reseau_a, exemples, {"regularization": 3}).run()
	for D0, D3 in zip(d0, d3):
		assert_close("biais", [row[0] for row in D0], [row[0] for row in D3])


# ==================== test_moyenne =========================
def test_moyenne():
	"""Les dérivées sur E sont la moyenne des dérivées sur chaque exemple seul."""
	reseau = Reseau([2, 3, 2], seed=21)
	exemples = _exemples_aleatoires(2, 2, 4, 21)

	global_ = BackPropagation(reseau, exemples).run()
	seuls = [BackPropagation(reseau, [e]).run() for e in exemples]
	moyenne = [
		matrice.scale(
			[[sum(s[i][r][c] for s in seuls) for c in range(len(W[0]))] for r in range(len(W))],
			1.0 / len(exemples),
		)
		for i, W in enumerate(reseau.poids)
	]
	assert_close("moyenne", global_, moyenne)

	# l'ordre des exemples n'a pas d'importance
	inverse = BackPropagation(reseau, list(reversed(exemples))).run()
	assert_close("ordre", global_, inverse)


# ==================== test_composition_delta =========================
def test_composition_delta():
	"""Seed delta = D  <=>  seed 0 puis + D / m."""
	reseau = Reseau([3, 2, 2], seed=8)
	exemples = _exemples_aleatoires(3, 2, 5, 8)
	rng = random.Random(8)
	D = [[[rng.uniform(-1, 1) for _ in row] for row in W] for W in reseau.poids]
	D_copie = matrice.clone_weights(D)

	avec_seed = BackPropagation(reseau, exemples, {"delta": D}).run()
	sans_seed = BackPropagation(reseau, exemples).run()
	attendu = [matrice.add(S, matrice.scale(Di, 1.0 / len(exemples))) for S, Di in zip(sans_seed, D)]
	assert_close("seed", avec_seed, attendu)

	# le seed de l'appelant n'est pas modifié, et run() est répétable
	assert D == D_copie
	bp = BackPropagation(reseau, exemples, Options(delta=tuple(D)))
	assert_close("idempotent", bp.run(), bp.run())


# ==================== test_gradient_numerique =========================
def test_gradient_numerique():
	"""La rétropropagation correspond aux différences finies."""
	reseau = Reseau([2, 3, 2], seed=3)
	exemples = _exemples_aleatoires(2, 2, 4, 3)

	ok, ecart = verifie_gradient(reseau, exemples, {"regularization": 0.0})
	assert ok, f"écart trop grand sans régularisation: {ecart}"

	ok, ecart = verifie_gradient(reseau, exemples, {"regularization": 0.3}, tolerance=1e-6)
	assert ok, f"écart trop grand avec régularisation: {ecart}"

	numerique = GradientNumerique(reseau, exemples, epsilon=1e-5).run()
	analytique = BackPropagation(reseau, exemples).run()
	assert ecart_max(numerique, analytique) < 1e-6


# ==================== test_fabrique =========================
def test_fabrique():
	reseau = _reseau_2_1()
	exemples = [([1, 1], [0])]

	bp = cree_algorithme("backpropagation", reseau, exemples, regularization=1)
	assert isinstance(bp, BackPropagation)
	assert bp.options.regularization == 1.0
	assert bp.options.delta is None

	gn = cree_algorithme("gradient_numerique", reseau, exemples)
	assert isinstance(gn, GradientNumerique)

	bp2 = BackPropagation.create(reseau, exemples, {"regularization": 1})
	assert_close("create", bp2.run(), bp.run())

	assert_raises(InvalidArgument, cree_algorithme, "inconnu", reseau, exemples)


# ==================== test_erreurs =========================
def test_erreurs():
	reseau = _reseau_2_1()
	bon = [([1, 1], [0])]

	# aucun exemple
	assert_raises(InvalidArgument, BackPropagation(reseau, []).run)
	# une seule couche
	assert_raises(InvalidArgument, BackPropagation(Reseau([2]), [([1, 1], [0])]).run)
	# seed delta de mauvaise taille
	assert_raises(InvalidArgument, BackPropagation(reseau, bon, {"delta": [[[0.0, 0.0]]]}).run)
	assert_raises(InvalidArgument, BackPropagation(reseau, bon, {"delta": []}).run)
	# seed delta qui n'est pas une liste de matrices
	assert_raises(InvalidArgument, BackPropagation, reseau, bon, {"delta": [[0.0, 0.0, 0.0]]})
	assert_raises(InvalidArgument, BackPropagation, reseau, bon, {"delta": 0})
	assert_raises(InvalidArgument, BackPropagation, reseau, bon, {"delta": [[["a", 0.0, 0.0]]]})
	# dimensions des exemples
	assert_raises(InvalidArgument, BackPropagation(reseau, [([1, 1, 1], [0])]).run)
	assert_raises(InvalidArgument, BackPropagation(reseau, [([1, 1], [0, 1])]).run)
	# options invalides
	assert_raises(InvalidArgument, BackPropagation, reseau, bon, {"regularization": -1})
	assert_raises(InvalidArgument, BackPropagation, reseau, bon, {"regularization": float("nan")})
	assert_raises(InvalidArgument, BackPropagation, reseau, bon, {"learning_rate": 0.1})
	# exemples mal formés
	assert_raises(InvalidArgument, BackPropagation, reseau, [{"input": [1, 1]}])
	assert_raises(InvalidArgument, BackPropagation, reseau, [42])
	# poids incohérents avec les couches
	assert_raises(InvalidArgument, Reseau, [2, 1], poids=[[[0.1, 0.2]]])
	assert_raises(InvalidArgument, Reseau, [2, 1], poids=[])
	assert_raises(InvalidArgument, Reseau, [2, 0])

	exc = assert_raises(InvalidArgument, matrice.add, [[1.0, 2.0]], [[1.0]])
	assert isinstance(exc, ValueError)


# ==================== test_affichage =========================
def test_affichage():
	W = [[0.1, -0.2, 0.3], [1.0, 0.0, 2.5]]
	assert matrice.shape_str(W) == "(2x3)"
	assert matrice.shape_str([0.5, 1.0]) == "(2x1)"
	assert matrice.shape_str([]) == "(0x0)"

	# colonne de biais séparée, largeur commune
	assert matrice.matrix_lines(W, precision=2) == [
		"[  0.10 | -0.20  0.30 ]",
		"[  1.00 |  0.00  2.50 ]",
	]
	assert matrice.matrix_lines(W, precision=2, biais=False)[0] == "[  0.10 -0.20  0.30 ]"
	assert matrice.matrix_lines([[1e-5]], precision=2) == ["[ 1.00e-05 ]"]
	assert matrice.matrix_lines([]) == ["[ ]"]

	assert _reseau_2_1().lignes(2) == ["Réseau [2, 1] (sigmoïde)", "W1 (1x3) =", "\t[ 0.10 | 0.20 0.30 ]"]


# ==================== test_loader =========================
def test_loader():
	from retroprop.loader import convert_label, load_exemples

	assert convert_label(1, 10) == [1, 0, 0, 0, 0, 0, 0, 0, 0, 0]
	assert convert_label(9, 10) == [0, 0, 0, 0, 0, 0, 0, 0, 1, 0]
	assert convert_label(0, 10) == [0, 0, 0, 0, 0, 0, 0, 0, 0, 1]
	assert convert_label(0, 3) == [1, 0, 0]
	assert convert_label(2, 3) == [0, 0, 1]
	assert_raises(InvalidArgument, convert_label, 10, 10)

	with tempfile.TemporaryDirectory() as tmp:
		p = Path(tmp) / "data_vc.txt"
		p.write_text("0: 0,5 1.0 9\n\n1: -1 2 9\n2: 3 4\n", encoding="utf-8")

		exemples = load_exemples(p, n_in=2, nb_sorties=3)
		assert exemples == [
			Exemple((0.5, 1.0), (1.0, 0.0, 0.0)),
			Exemple((-1.0, 2.0), (0.0, 1.0, 0.0)),
			Exemple((3.0, 4.0), (0.0, 0.0, 1.0)),
		]

		melange = load_exemples(p, n_in=2, nb_sorties=3, seed=4)
		assert sorted(melange, key=lambda e: e.entree) == sorted(exemples, key=lambda e: e.entree)
		assert melange == load_exemples(p, n_in=2, nb_sorties=3, seed=4)

		derivees = BackPropagation(Reseau([2, 2, 3], seed=1), exemples).run()
		assert len(derivees) == 2

		bad = Path(tmp) / "bad.txt"
		bad.write_text("1 2 3\n", encoding="utf-8")
		assert_raises(InvalidArgument, load_exemples, bad, n_in=2, nb_sorties=3)


# ==================== test_lanceur =========================
def test_lanceur():
	from retroprop import lanceur

	out = io.StringIO()
	with contextlib.redirect_stdout(out):
		code = lanceur.main(["--seed", "1", "--regularisation", "0.1", "--verifie"])
	assert code == 0
	texte = out.getvalue()
	assert "dJ/dW1 (2x3)" in texte
	assert "dJ/dW2 (1x3)" in texte
	assert "OK" in texte

	err = io.StringIO()
	with contextlib.redirect_stdout(io.StringIO()), contextlib.redirect_stderr(err):
		code = lanceur.main(["--couches", "3", "1"])
	assert code == 2
	assert "Exemple 0" in err.getvalue()

	# plus d'option --fct: seule la sigmoïde est prise en charge
	with contextlib.redirect_stderr(io.StringIO()):
		exc = assert_raises(SystemExit, lanceur.main, ["--fct", "3"])
	assert exc.code == 2


# ==================== run =========================
def run() -> None:
	"""Exécute tous les tests du module."""
	tests = [(name, fn) for name, fn in sorted(globals().items()) if name.startswith("test_") and callable(fn)]
	for name, fn in tests:
		fn()
		print(f"OK: {name}")
	print(f"OK: smoke_test ({len(tests)} tests)")


if __name__ == "__main__":
	run()
