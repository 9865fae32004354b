# Front ends
# - console.py: interactive text menu and round loop
# - catalogue_viewer.py: Streamlit catalogue and balance viewer
