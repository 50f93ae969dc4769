"""
Zero Rate Discount Factor Engine

Modules:
- discount_factors: ZeroRateDiscountFactors (discount factors, spread-adjusted
  discount factors, point and parameter sensitivities, perturbation)
- compounding: continuous <-> periodic rate conversions and derivatives
- sensitivity: point / unit / aggregated parameter sensitivity value objects
- curves: curve protocol, metadata, linear nodal curve
- cashflows: PV, point sensitivities and implied spread of dated cashflows
- risk: finite-difference checks and bucketed PV01
- scenarios: curve perturbations and scenario runners
- utils: day counts

Callers should import from the submodules.
"""
