import os
import logging
import streamlit as st
import pandas as pd
import numpy as np
import plotly.express as px
from safcore.utils import ScenarioInput, InvalidInput, NO_PAYBACK, CONVERSION_RATE_L_PER_T
from safcore.finance import compute_scenario
from safcore.projection import build_projection, cash_flow_metrics, projection_summary
from safcore.carbon import annual_carbon, totals
from safcore.breakeven import PARTNERSHIP_STRUCTURES, breakeven_months, monthly_cumulative, breakeven_price
from safcore.sensitivity import sensitivity_impacts, monte_carlo
from safcore.cost_benefit import compare_valorization
from safcore.optimize import optimize_config
from safcore.scenarios import REGIONS, SCENARIO_LABELS, get_region, get_scenario
from safcore.export import scenario_report, report_to_json, rows_to_csv, export_filename

logging.basicConfig(level=os.getenv('SAF_LOG_LEVEL', 'INFO'))
logger = logging.getLogger(__name__)

st.set_page_config(page_title='SAF – Valorisation des marcs de raisin', layout='wide')

st.sidebar.title('Navigation')
region_id = st.sidebar.selectbox('Région', list(REGIONS), format_func=lambda r: REGIONS[r].name)
page = st.sidebar.radio('Aller à', ['Hypothèses', 'Résultats', 'Projections', 'Point mort',
                                    'Sensibilité & risque', 'Coûts-bénéfices', 'Exports'])
region = get_region(region_id)


@st.cache_data
def df_to_csv_bytes(df):
    return df.to_csv(index=False).encode('utf-8')


def fmt_payback(years):
    return 'jamais' if years >= NO_PAYBACK else f"{years:.1f} ans"


def current_inputs():
    if 'inputs' not in st.session_state or st.session_state.get('region') != region_id:
        st.session_state.inputs = get_scenario(region_id, 'realiste')
        st.session_state.scenario = 'realiste'
        st.session_state.region = region_id
    return st.session_state.inputs


# --- Page 1: Hypothèses ---
if page == 'Hypothèses':
    st.header(f"Hypothèses – {region.name}")
    st.caption(f"Marc total : {region.total_biomass:,.0f} t/an · disponible : {region.available_biomass:,.0f} t/an")

    preset = st.selectbox('Scénario de référence', list(SCENARIO_LABELS), index=1,
                          format_func=lambda s: SCENARIO_LABELS[s])
    base = get_scenario(region_id, preset)

    st.subheader('Production')
    col1, col2, col3 = st.columns(3)
    with col1:
        biomass = st.number_input('Biomasse (t/an)', min_value=0.0, value=float(base.biomass_tonnes), step=1000.0)
        efficiency = st.slider('Efficacité ATJ (%)', 0.0, 100.0, float(base.process_efficiency))
    with col2:
        price = st.number_input('Prix SAF (€/L)', min_value=0.01, value=float(base.saf_price), step=0.05)
        opex = st.number_input('Coûts opérationnels (€/L)', min_value=0.0, value=float(base.opex_per_liter), step=0.05)
    with col3:
        capex = st.number_input('Investissement (€)', min_value=1.0, value=float(base.capex_initial), step=1e6, format='%.0f')
        years = st.number_input("Horizon d'analyse (années)", 1, 40, int(base.years))

    st.subheader('Financement & fiscalité')
    col4, col5, col6 = st.columns(3)
    with col4:
        debt_ratio = st.slider("Part d'endettement", 0.0, 1.0, float(base.debt_ratio))
        interest = st.slider("Taux d'intérêt", 0.0, 0.15, float(base.interest_rate), step=0.005, format='%.3f')
    with col5:
        tax = st.slider("Taux d'impôt sur les sociétés", 0.0, 0.5, float(base.tax_rate))
        wacc = st.slider('WACC', 0.0, 0.2, float(base.discount_rate), step=0.005, format='%.3f')
    with col6:
        depreciation = st.slider('Amortissement annuel', 0.0, 0.2, float(base.depreciation_rate), step=0.01)
        terminal = st.slider('Valeur terminale (fraction du capex)', 0.0, 1.0, float(base.terminal_value_fraction))

    try:
        p = ScenarioInput(
            biomass_tonnes=float(biomass), process_efficiency=float(efficiency), saf_price=float(price),
            opex_per_liter=float(opex), capex_initial=float(capex), debt_ratio=float(debt_ratio),
            interest_rate=float(interest), tax_rate=float(tax), discount_rate=float(wacc),
            depreciation_rate=float(depreciation), years=int(years), terminal_value_fraction=float(terminal),
            conversion_rate=CONVERSION_RATE_L_PER_T,
        )
    except InvalidInput as e:
        logger.warning('rejected inputs: %s', e)
        st.error(f"Paramètre invalide : {e}")
        st.stop()

    st.session_state.inputs = p
    st.session_state.scenario = preset
    st.session_state.region = region_id
    st.success('Hypothèses enregistrées. Consultez la page Résultats.')

# --- Page 2: Résultats ---
elif page == 'Résultats':
    st.header('Résultats du scénario')
    p = current_inputs()
    out = compute_scenario(p)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric('Production SAF', f"{out.saf_production/1e6:,.1f} ML/an")
    col2.metric("Chiffre d'affaires", f"€{out.revenue/1e6:,.1f}M")
    col3.metric('ROI annuel', f"{out.roi_pct:.1f}%")
    col4.metric('Retour sur investissement', fmt_payback(out.payback_year))

    col5, col6, col7 = st.columns(3)
    col5.metric('VAN', f"€{out.npv/1e6:,.1f}M")
    col6.metric('TRI', f"{out.irr_pct:.1f}%")
    col7.metric('Flux de trésorerie', f"€{out.cash_flow/1e6:,.1f}M/an")

    st.subheader('Compte de résultat annuel')
    df_pl = pd.DataFrame([
        {'poste': k, 'valeur': v} for k, v in out.to_dict().items()
        if k not in ('roi_pct', 'payback_year', 'npv', 'irr_pct', 'saf_production')
    ])
    st.dataframe(df_pl, use_container_width=True)
    fig = px.bar(df_pl, x='poste', y='valeur', title='Cascade financière (€)')
    st.plotly_chart(fig, use_container_width=True)

    be_price = breakeven_price(p)
    st.info(f"Prix SAF d'équilibre (VAN = 0) : €{be_price:,.3f}/L")

    co2_total, credits_total = totals(annual_carbon(p))
    st.metric(f"CO₂ évité sur {p.years} ans", f"{co2_total/1000:,.1f} kt",
              help=f"Valeur des crédits carbone : €{credits_total/1e6:,.1f}M")

# --- Page 3: Projections ---
elif page == 'Projections':
    st.header('Projections économiques')
    p = current_inputs()
    horizon = st.radio('Horizon', sorted({5, 10, p.years}), horizontal=True, format_func=lambda n: f"{n} ans")
    cash_flows, rows = build_projection(p, years=int(horizon))
    npv, irr, payback = cash_flow_metrics(cash_flows, p.discount_rate)
    summary = projection_summary(rows)

    col1, col2, col3 = st.columns(3)
    col1.metric('Trésorerie cumulée', f"€{summary['final_cumulative_cash_flow']/1e6:,.1f}M")
    col2.metric('TRI (montée en charge)', f"{irr*100:.2f}%" if np.isfinite(irr) else 'n/a')
    col3.metric('Retour sur investissement', fmt_payback(payback))
    st.caption(f"VAN des flux projetés : €{npv/1e6:,.1f}M")

    df_proj = pd.DataFrame(rows)
    st.dataframe(df_proj, use_container_width=True)
    fig1 = px.bar(df_proj, x='year', y=['revenue', 'opex', 'cash_flow'], barmode='group',
                  title="Chiffre d'affaires, coûts et flux de trésorerie")
    st.plotly_chart(fig1, use_container_width=True)
    fig2 = px.line(df_proj, x='year', y='cumulative_cash_flow', title='Trésorerie cumulée')
    st.plotly_chart(fig2, use_container_width=True)

# --- Page 4: Point mort ---
elif page == 'Point mort':
    st.header('Analyse du point mort')
    p = current_inputs()
    structure_id = st.selectbox('Structure de partenariat', list(PARTNERSHIP_STRUCTURES),
                                format_func=lambda s: PARTNERSHIP_STRUCTURES[s].name)
    structure = PARTNERSHIP_STRUCTURES[structure_id]
    months = st.slider('Horizon (mois)', 12, 120, 60, step=12)
    st.caption(structure.description)

    rows = []
    curves = {'mois': list(range(1, months+1))}
    cases = [(label, get_scenario(region_id, name)) for name, label in SCENARIO_LABELS.items()]
    cases.append(('Hypothèses courantes', p))
    for label, sp in cases:
        be = breakeven_months(sp, structure)
        rows.append({'scénario': label, 'point mort (mois)': be if be is not None else '> 120'})
        curves[label] = monthly_cumulative(sp, structure, months)
    st.dataframe(pd.DataFrame(rows), use_container_width=True)
    df_curves = pd.DataFrame(curves)
    fig = px.line(df_curves, x='mois', y=[label for label, _ in cases], title="Profit cumulé de l'opérateur (€)")
    st.plotly_chart(fig, use_container_width=True)

# --- Page 5: Sensibilité & risque ---
elif page == 'Sensibilité & risque':
    st.header('Sensibilité & risque')
    p = current_inputs()

    st.subheader('Impact sur le ROI d\'une hausse de 10 %')
    df_sens = pd.DataFrame(sensitivity_impacts(p))
    fig = px.bar(df_sens, x='impact', y='label', orientation='h', title='Tornado (variation du ROI, %)')
    st.plotly_chart(fig, use_container_width=True)

    st.subheader('Monte Carlo')
    col1, col2, col3, col4 = st.columns(4)
    price_sigma = col1.slider('Volatilité prix σ', 0.0, 0.5, 0.15)
    capex_sigma = col2.slider('Volatilité capex σ', 0.0, 0.5, 0.15)
    opex_sigma = col3.slider('Volatilité opex σ', 0.0, 0.5, 0.10)
    rate_sigma = col4.slider('Écart-type WACC', 0.0, 0.1, 0.02)
    runs = st.slider('Tirages', 100, 5000, 1000, step=100)
    with st.spinner('Simulation en cours...'):
        npvs = monte_carlo(p, n=runs, price_sigma=price_sigma, capex_sigma=capex_sigma,
                           opex_sigma=opex_sigma, rate_sigma=rate_sigma)
    st.write(f"VAN moyenne : €{np.mean(npvs)/1e6:,.1f}M | P(VAN>0) : {100*np.mean(npvs > 0):.1f}%")
    st.plotly_chart(px.histogram(npvs, nbins=50, title='Distribution de la VAN'), use_container_width=True)

    st.subheader('Arbitrage VAN / CO₂')
    if st.button("Lancer l'optimisation"):
        best, combos = optimize_config(p, weights=(0.5, 0.5))
        st.write('Meilleure configuration :', best)
        df = pd.DataFrame(combos)
        fig = px.scatter(df, x='co2', y='npv', color=df['wacc'].astype(str), symbol=df['scale'].astype(str),
                         title='Compromis : tCO₂e évitées vs VAN')
        st.plotly_chart(fig, use_container_width=True)

# --- Page 6: Coûts-bénéfices ---
elif page == 'Coûts-bénéfices':
    st.header('Analyse coûts-bénéfices')
    p = current_inputs()
    df_cb = pd.DataFrame(compare_valorization(p, region.baseline))
    st.dataframe(df_cb, use_container_width=True)
    fig = px.bar(df_cb[df_cb['category'] != 'Emplois'], x='category', y=['traditional', 'saf'], barmode='group',
                 title='Valorisation traditionnelle vs SAF')
    st.plotly_chart(fig, use_container_width=True)

# --- Page 7: Exports ---
else:
    st.header('Exports')
    p = current_inputs()
    scenario = st.session_state.get('scenario', 'realiste')
    out = compute_scenario(p)
    report = scenario_report(region.id, scenario, p, out)
    _, rows = build_projection(p)

    st.json(report)
    st.download_button('Analyse ROI (JSON)', report_to_json(report),
                       export_filename('analyse-roi', region.id, scenario, 'json'), 'application/json')
    st.download_button('Projections (CSV)', rows_to_csv(rows),
                       export_filename('projections', region.id, scenario, 'csv'), 'text/csv')
    st.download_button('Carbone (CSV)', df_to_csv_bytes(pd.DataFrame(annual_carbon(p))),
                       export_filename('carbone', region.id, scenario, 'csv'), 'text/csv')
