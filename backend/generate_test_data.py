
import pandas as pd

sales = pd.DataFrame({
    'Month': ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun'],
    'Sales': [100, 200, 'n/a', 400, 500, 350],
    'Region': ['North', 'South', 'North', 'East', 'West', 'South']
})

orders = pd.DataFrame({
    'Order': [f'ORD-{i:04d}' for i in range(1, 151)],
    'Amount': [round(10 + i * 1.5, 2) for i in range(150)]
})

with pd.ExcelWriter('test_data.xlsx', engine='openpyxl') as writer:
    sales.to_excel(writer, sheet_name='Sales', index=False)
    orders.to_excel(writer, sheet_name='Orders', index=False)
    pd.DataFrame().to_excel(writer, sheet_name='Empty', index=False)

print("Created test_data.xlsx")
